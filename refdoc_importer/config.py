"""
Configuration for the reference documentation importer
"""

from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class ImporterConfig(BaseSettings):
    """Importer configuration loaded from environment"""

    # Record kinds (post types)
    post_type_class: str = "wpapi-class"
    post_type_function: str = "wpapi-function"

    # Taxonomies
    taxonomy_file: str = "wpapi-source-file"
    taxonomy_since_version: str = "wpapi-since"
    taxonomy_package: str = "wpapi-package"

    # Prefix for record metadata keys (args, line_num, tags, ...)
    meta_prefix: str = "_wpapi_"

    # Throttling: pause after every N items in a loop
    throttle_batch_size: int = Field(default=10, ge=1)
    throttle_seconds: float = Field(default=3.0, ge=0)

    # Couchbase Configuration
    couchbase_host: str = "localhost"
    couchbase_username: str = "Administrator"
    couchbase_password: str = ""
    couchbase_bucket: str = "code_docs"
    couchbase_timeout_seconds: int = 10

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @model_validator(mode="after")
    def check_kinds_differ(self):
        if self.post_type_class == self.post_type_function:
            raise ValueError("post_type_class and post_type_function must differ")
        return self

    def meta_key(self, name: str) -> str:
        """Full metadata key for a short name, e.g. 'line_num' -> '_wpapi_line_num'"""
        return f"{self.meta_prefix}{name}"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = 'ignore'
