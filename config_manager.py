"""
Configuration management for the Listing Kit service.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    service_name: str


@dataclass
class QuotaConfig:
    """Entitlement configuration settings."""
    base_free_limit: int
    max_update_retries: int


@dataclass
class StoreConfig:
    """Record store configuration settings."""
    data_dir: str
    lock_timeout_seconds: float


@dataclass
class ProviderConfig:
    """Model provider configuration settings."""
    openai_api_key: str


@dataclass
class BillingConfig:
    """Payment provider configuration settings."""
    razorpay_webhook_secret: str


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "web_app_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 8080,
                "debug": False,
                "service_name": "listing-kit"
            },
            "quota": {
                "base_free_limit": 2,
                "max_update_retries": 5
            },
            "store": {
                "data_dir": "data",
                "lock_timeout_seconds": 5.0
            },
            "provider": {
                "openai_api_key": ""
            },
            "billing": {
                "razorpay_webhook_secret": ""
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        # Quota settings
        if os.getenv("BASE_FREE_LIMIT"):
            self._config["quota"]["base_free_limit"] = int(os.getenv("BASE_FREE_LIMIT"))

        if os.getenv("QUOTA_MAX_UPDATE_RETRIES"):
            self._config["quota"]["max_update_retries"] = int(os.getenv("QUOTA_MAX_UPDATE_RETRIES"))

        # Store settings
        if os.getenv("DATA_DIR"):
            self._config["store"]["data_dir"] = os.getenv("DATA_DIR")

        if os.getenv("STORE_LOCK_TIMEOUT"):
            self._config["store"]["lock_timeout_seconds"] = float(os.getenv("STORE_LOCK_TIMEOUT"))

        # Provider and billing secrets
        if os.getenv("OPENAI_API_KEY") is not None:
            self._config["provider"]["openai_api_key"] = os.getenv("OPENAI_API_KEY")

        if os.getenv("RAZORPAY_WEBHOOK_SECRET"):
            self._config["billing"]["razorpay_webhook_secret"] = os.getenv("RAZORPAY_WEBHOOK_SECRET")

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
            service_name=app_config["service_name"]
        )

    def get_quota_config(self) -> QuotaConfig:
        """Get entitlement configuration."""
        quota_config = self._config["quota"]
        return QuotaConfig(
            base_free_limit=quota_config["base_free_limit"],
            max_update_retries=quota_config["max_update_retries"]
        )

    def get_store_config(self) -> StoreConfig:
        """Get record store configuration."""
        store_config = self._config["store"]
        return StoreConfig(
            data_dir=store_config["data_dir"],
            lock_timeout_seconds=store_config["lock_timeout_seconds"]
        )

    def get_provider_config(self) -> ProviderConfig:
        """Get model provider configuration."""
        return ProviderConfig(openai_api_key=self._config["provider"]["openai_api_key"] or "")

    def get_billing_config(self) -> BillingConfig:
        """Get payment provider configuration."""
        return BillingConfig(
            razorpay_webhook_secret=self._config["billing"]["razorpay_webhook_secret"] or ""
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_quota_config() -> QuotaConfig:
    """Get entitlement configuration."""
    return config_manager.get_quota_config()


def get_store_config() -> StoreConfig:
    """Get record store configuration."""
    return config_manager.get_store_config()


def get_provider_config() -> ProviderConfig:
    """Get model provider configuration."""
    return config_manager.get_provider_config()


def get_billing_config() -> BillingConfig:
    """Get payment provider configuration."""
    return config_manager.get_billing_config()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
