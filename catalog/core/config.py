from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class PersistenceSettings(BaseSettings):
    mode: Literal["local", "remote"] = Field("local")
    base_url: str = Field("http://localhost:5000/api")
    api_token: Optional[str] = Field(None)
    timeout_seconds: float = Field(10.0)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class DatabaseSettings(BaseSettings):
    database_url: str = Field("sqlite:///./catalog.db")
    echo: bool = Field(False)


class TreeSettings(BaseSettings):
    max_depth: int = Field(16, ge=1)  # root categories sit at depth 0
    max_categories: int = Field(5000, ge=1)


class AppSettings(BaseSettings):
    debug: bool = Field(False)
    allowed_hosts: str = Field("http://localhost:3000,http://localhost:8000")
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    tree: TreeSettings = Field(default_factory=TreeSettings)

    @classmethod
    def _split_allowed_hosts(cls, v: str) -> List[str]:
        if not v or not v.strip():
            return []
        hosts = []
        for host in v.split(","):
            host = host.strip().rstrip("/")
            if host.startswith("http://") or host.startswith("https://"):
                hosts.append(host)
        return hosts

    @property
    def allowed_hosts_list(self) -> List[str]:
        """Convert allowed_hosts string to list."""
        if not self.allowed_hosts:
            return ["http://localhost:3000", "http://localhost:8000"]
        return self._split_allowed_hosts(self.allowed_hosts)

    class Config:
        env_prefix = "APP_"
        case_sensitive = False
        env_nested_delimiter = "__"
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        extra = "ignore"


settings: AppSettings = AppSettings()

if __name__ == "__main__":
    print(AppSettings().model_dump())
