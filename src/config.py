"""Configuration management for the result viewer"""
from typing import Literal
from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings

from src.components.render_strategy import RenderOptions


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database Configuration
    database_type: Literal["sqlite", "postgresql", "mysql"] = Field(
        default="sqlite", alias="DATABASE_TYPE"
    )
    database_url: str = Field(default="sqlite:///results_demo.db", alias="DATABASE_URL")
    max_rows_return: int = Field(default=50000, alias="MAX_ROWS_RETURN")
    sample_row_count: int = Field(default=12000, alias="SAMPLE_ROW_COUNT")

    # Rendering Configuration
    pagination_threshold: int = Field(default=1000, alias="PAGINATION_THRESHOLD")
    virtual_scroll_threshold: int = Field(default=5000, alias="VIRTUAL_SCROLL_THRESHOLD")
    items_per_page: int = Field(default=100, alias="ITEMS_PER_PAGE")
    item_height: int = Field(default=40, alias="ITEM_HEIGHT")
    container_height: int = Field(default=400, alias="CONTAINER_HEIGHT")
    scroll_buffer: int = Field(default=5, alias="SCROLL_BUFFER")
    long_text_threshold: int = Field(default=50, alias="LONG_TEXT_THRESHOLD")

    # Export Configuration
    csv_quoting: Literal["lenient", "rfc4180"] = Field(default="lenient", alias="CSV_QUOTING")
    export_filename: str = Field(default="query_results.csv", alias="EXPORT_FILENAME")

    # Application Configuration
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Server Configuration
    server_host: str = Field(default="127.0.0.1", alias="SERVER_HOST")
    gradio_share: bool = Field(default=False, alias="GRADIO_SHARE")
    gradio_server_port: int = Field(default=7860, alias="GRADIO_SERVER_PORT")

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    def render_options(self) -> RenderOptions:
        """Build the rendering thresholds from the current settings."""
        return RenderOptions(
            pagination_threshold=self.pagination_threshold,
            virtual_scroll_threshold=self.virtual_scroll_threshold,
            items_per_page=self.items_per_page,
            item_height=self.item_height,
            container_height=self.container_height,
            scroll_buffer=self.scroll_buffer,
            long_text_threshold=self.long_text_threshold,
        )


# Load settings from environment
settings = Settings()
