"""
核心配置模块
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from pathlib import Path


class Settings(BaseSettings):
    """系统配置"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # 资源（任务图配置 + 模板图片）
    resource_dir: str = Field(default="./assets")
    config_file: str = Field(default="config.yaml")

    # ADB
    adb_path: str = Field(default="adb")
    adb_timeout: float = Field(default=10.0)

    # Web服务
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=9001)

    # 日志
    log_level: str = Field(default="INFO")
    log_path: str = Field(default="./logs")
    log_retention_days: int = Field(default=3)
    log_console_enabled: bool = Field(default=True)

    @property
    def config_path(self) -> str:
        """任务图配置文件的完整路径"""
        return str(Path(self.resource_dir) / self.config_file)


# 全局配置实例
settings = Settings()
