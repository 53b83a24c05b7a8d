"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use SETUPMINI_ prefix (e.g., SETUPMINI_STRICT_MODE=true).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use SETUPMINI_ prefix.

    Examples:
        SETUPMINI_COMPONENT_NAME=AnonymousComponent
        SETUPMINI_STRICT_MODE=true
        SETUPMINI_RUNTIME_LOADER=vueEsmRuntime
    """

    model_config = SettingsConfigDict(
        env_prefix="SETUPMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Generated definition
    component_name: str = Field(
        default="SetupComponent",
        description="Component name emitted when the caller does not supply one",
    )

    export_prefix: str = Field(
        default="module.exports = ",
        description="Fixed prefix of every generated module body",
    )

    # Reserved identifiers shared with the evaluator
    props_param: str = Field(
        default="__props__",
        description="First parameter of the generated setup function",
    )

    ctx_param: str = Field(
        default="__ctx__",
        description="Second parameter of the generated setup function",
    )

    emit_param: str = Field(
        default="__emit__",
        description="Local bound to the context emit function",
    )

    defaults_helper: str = Field(
        default="__applyDefaults__",
        description="Name of the synthesized defaults-merge helper",
    )

    marker_prefix: str = Field(
        default="// [extracted]",
        description="Prefix of bookkeeping lines removed before emission",
    )

    # Module surface
    framework_module: str = Field(
        default="vue",
        description="Module whose imported names are provided by the runtime itself",
    )

    component_extension: str = Field(
        default=".vue",
        description="File extension identifying component-file imports",
    )

    runtime_loader: str = Field(
        default="vueEsmRuntime",
        description="Global loader called for component imports",
    )

    suspend_keyword: str = Field(
        default="await",
        description="Keyword that makes the generated setup function async at top level",
    )

    # Compilation configuration
    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during compilation",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: duplicate macro declarations raise instead of warning",
    )

    def marker_make(self, text: str) -> str:
        """
        Generate a bookkeeping marker line for removed source text.

        Args:
            text: Source text being replaced (e.g. an import statement)

        Returns:
            Marker line (e.g., "// [extracted] import x from 'y'")

        Example:
            >>> settings = AppSettings()
            >>> settings.marker_make("defineExpose")
            '// [extracted] defineExpose'
        """
        return f"{self.marker_prefix} {text}"

    def marker_is(self, line: str) -> bool:
        """
        Check whether a generated line is a bookkeeping marker.

        Leading whitespace is ignored so indented markers are recognized.
        """
        return line.strip().startswith(self.marker_prefix)


# Singleton instance - import this in your code
appsettings = AppSettings()
