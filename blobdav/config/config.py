#!/usr/bin/env python3
"""
blobdav/config/config.py
Configuration management for the blobdav gateway
"""

import os
import json
from pathlib import Path
from typing import Optional, Dict, Any, Mapping


ENV_PREFIX = 'BLOBDAV_'

STORE_BACKENDS = ('memory', 'filesystem', 's3')

SECRET_KEYS = ('WEBDAV_PASS', 'S3_SECRET_ACCESS_KEY')


class ConfigError(ValueError):
    """Raised when the gateway configuration is unusable"""


def normalize_prefix(prefix: str) -> str:
    """Make sure the namespace prefix starts and ends with a single slash"""
    prefix = '/' + prefix.strip('/') + '/'
    return '/' if prefix == '//' else prefix


class ConfigService:
    """Resolves gateway settings.

    Precedence, lowest first: built-in defaults, the JSON config file,
    ``BLOBDAV_*`` environment variables, explicit overrides (CLI options).
    """

    def __init__(self, config_file: Optional[str] = None,
                 overrides: Optional[Mapping[str, Any]] = None,
                 environ: Optional[Mapping[str, str]] = None):
        self.home_dir = Path.home()
        self.config_dir = self.home_dir / '.blobdav'
        self.explicit_file = config_file is not None
        self.config_file = Path(config_file).expanduser() if config_file else self.config_dir / 'config.json'

        self.config: Dict[str, Any] = {
            'WEBDAV_USER': 'zotero',
            'WEBDAV_PASS': '',
            'NAMESPACE_PREFIX': '/zotero/',
            'REALM': 'Zotero WebDAV',
            'HOST': '0.0.0.0',
            'PORT': 8080,
            'THREADS': 8,
            'STORE_BACKEND': 'memory',
            'STORE_ROOT': str(self.config_dir / 'store'),
            'S3_BUCKET': '',
            'S3_ENDPOINT_URL': '',
            'S3_REGION': 'auto',
            'S3_ACCESS_KEY_ID': '',
            'S3_SECRET_ACCESS_KEY': '',
            'LOG_LEVEL': 'INFO',
            'ENABLE_FILE_LOGGING': False,
            'LOG_FILE': 'blobdav.log',
        }

        self.config.update(self._read_config_file())
        self.config.update(self._read_environ(os.environ if environ is None else environ))
        if overrides:
            self.config.update({k: v for k, v in overrides.items() if v is not None})

        self.config['NAMESPACE_PREFIX'] = normalize_prefix(str(self.config['NAMESPACE_PREFIX']))
        self.config['STORE_BACKEND'] = str(self.config['STORE_BACKEND']).lower()

    def _read_config_file(self) -> Dict[str, Any]:
        """Read the JSON config file, if there is one"""
        if not self.config_file.exists():
            if self.explicit_file:
                raise ConfigError(f"Config file not found: {self.config_file}")
            return {}

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {self.config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.config_file} must contain a JSON object")
        return {key.upper(): value for key, value in data.items()}

    def _read_environ(self, environ: Mapping[str, str]) -> Dict[str, Any]:
        """Pick up BLOBDAV_* environment variables for known keys"""
        values = {}
        for key in self.config:
            env_key = ENV_PREFIX + key
            if env_key in environ:
                values[key] = environ[env_key]
        return values

    def get(self, key: str) -> Any:
        """Get configuration value"""
        if key not in self.config:
            raise ConfigError(f"Config key {key} not found")
        return self.config[key]

    def get_int(self, key: str) -> int:
        value = self.get(key)
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Config key {key} must be an integer, got {value!r}") from e

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ('1', 'true', 'yes', 'on')

    @property
    def namespace_prefix(self) -> str:
        return self.config['NAMESPACE_PREFIX']

    def validate(self) -> None:
        """Check the settings needed to serve requests"""
        if not self.get('WEBDAV_USER') or not self.get('WEBDAV_PASS'):
            raise ConfigError("WEBDAV_USER and WEBDAV_PASS must both be set")

        backend = self.get('STORE_BACKEND')
        if backend not in STORE_BACKENDS:
            raise ConfigError(f"Unknown STORE_BACKEND {backend!r}, expected one of {', '.join(STORE_BACKENDS)}")
        if backend == 's3' and not self.get('S3_BUCKET'):
            raise ConfigError("S3_BUCKET is required for the s3 backend")

        port = self.get_int('PORT')
        if not 0 < port < 65536:
            raise ConfigError(f"PORT out of range: {port}")
        if self.get_int('THREADS') < 1:
            raise ConfigError("THREADS must be at least 1")

    def as_dict(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Effective settings, with secrets masked for display"""
        data = dict(self.config)
        if mask_secrets:
            for key in SECRET_KEYS:
                if data.get(key):
                    data[key] = '********'
        return data
