#!/usr/bin/env python3
"""
blobdav CLI - serve a blob store over WebDAV and probe running gateways
"""

import json
import sys
from typing import Optional

import click

from . import __version__
from .config.config import ConfigService, ConfigError, STORE_BACKENDS
from .utils.api import DavClient
from .utils.logger import setup_logging
from .webdav.server import WebDAVServer


def format_size(size_bytes: Optional[int]) -> str:
    """Format bytes to human readable size"""
    if not size_bytes:
        return "0 B"
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


@click.group()
@click.version_option(version=__version__)
def cli():
    """WebDAV gateway for flat blob stores"""
    pass


@cli.command()
@click.option('--config', '-c', 'config_file', type=click.Path(dir_okay=False), help='JSON config file')
@click.option('--host', help='Interface to bind to')
@click.option('--port', '-p', type=int, help='Port to listen on')
@click.option('--backend', type=click.Choice(STORE_BACKENDS, case_sensitive=False), help='Blob store backend')
@click.option('--root', 'store_root', help='Directory of the filesystem backend')
@click.option('--prefix', 'namespace_prefix', help='URL prefix served by the gateway (default: /zotero/)')
@click.option('--threads', type=int, help='Worker threads')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False))
def serve(config_file: Optional[str], host: Optional[str], port: Optional[int], backend: Optional[str],
          store_root: Optional[str], namespace_prefix: Optional[str], threads: Optional[int],
          log_level: Optional[str]):
    """Run the WebDAV gateway"""
    overrides = {
        'HOST': host,
        'PORT': port,
        'STORE_BACKEND': backend,
        'STORE_ROOT': store_root,
        'NAMESPACE_PREFIX': namespace_prefix,
        'THREADS': threads,
        'LOG_LEVEL': log_level,
    }
    try:
        config = ConfigService(config_file, overrides=overrides)
        config.validate()
    except ConfigError as e:
        click.echo(f"❌ Configuration error: {e}", err=True)
        sys.exit(1)

    log_file = config.get('LOG_FILE') if config.get_bool('ENABLE_FILE_LOGGING') else None
    setup_logging(config.get('LOG_LEVEL'), log_file)

    server = WebDAVServer(config)
    click.echo(f"🌐 Serving {config.namespace_prefix} on http://{config.get('HOST')}:{config.get_int('PORT')}")
    click.echo(f"👤 Username: {config.get('WEBDAV_USER')}")
    click.echo("Press Ctrl+C to stop the server")
    try:
        server.run()
    except KeyboardInterrupt:
        click.echo("\n🛑 WebDAV gateway stopped")


@cli.command()
@click.argument('url')
@click.option('--user', '-u', required=True, help='WebDAV username')
@click.option('--password', '-p', prompt=True, hide_input=True, help='WebDAV password')
@click.option('--depth', type=click.Choice(['0', '1']), default='1', show_default=True, help='PROPFIND depth')
@click.option('--timeout', type=int, default=10, show_default=True, help='Request timeout in seconds')
def check(url: str, user: str, password: str, depth: str, timeout: int):
    """Probe a running gateway with OPTIONS and PROPFIND"""
    client = DavClient(url, user, password, timeout=timeout)
    try:
        capabilities = client.options()
        click.echo(f"✅ OPTIONS: DAV {capabilities['DAV'] or '-'}, Allow: {capabilities['Allow'] or '-'}")

        entries = client.propfind(depth=int(depth))
    except (ValueError, ConnectionError) as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo(f"✅ PROPFIND returned {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
    for entry in entries:
        if entry['is_collection']:
            click.echo(f"  📁 {entry['href']}")
        else:
            click.echo(f"  📄 {entry['href']}  {format_size(entry['size'])}  {entry['last_modified']}")


@cli.command('show-config')
@click.option('--config', '-c', 'config_file', type=click.Path(dir_okay=False), help='JSON config file')
def show_config(config_file: Optional[str]):
    """Print the effective configuration (secrets masked)"""
    try:
        config = ConfigService(config_file)
    except ConfigError as e:
        click.echo(f"❌ Configuration error: {e}", err=True)
        sys.exit(1)
    click.echo(json.dumps(config.as_dict(), indent=2, sort_keys=True))


if __name__ == '__main__':
    cli()
