"""
Network utilities for aio_webclient.

This module provides helpers for SSL context setup and for validating and
formatting connection targets.
"""

import ssl
from typing import List, Optional, Union


def create_ssl_context(
    alpn_protocols: Optional[List[str]] = None,
    verify_mode: int = ssl.CERT_REQUIRED,
    check_hostname: bool = True,
    cert_file: Optional[str] = None,
    key_file: Optional[str] = None,
) -> ssl.SSLContext:
    """
    Create an SSL context with optimal settings.

    Args:
        alpn_protocols: Optional list of ALPN protocols to negotiate
        verify_mode: SSL verification mode
        check_hostname: Whether to verify hostname
        cert_file: Path to certificate file (for client auth)
        key_file: Path to private key file (for client auth)

    Returns:
        Configured SSL context

    Raises:
        ssl.SSLError: If SSL context creation fails
    """
    context = ssl.create_default_context()
    context.check_hostname = check_hostname
    context.verify_mode = verify_mode

    if alpn_protocols:
        context.set_alpn_protocols(alpn_protocols)

    context.options |= ssl.OP_NO_COMPRESSION
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    if cert_file and key_file:
        context.load_cert_chain(cert_file, key_file)

    return context


def format_host_header(host: str, port: int, scheme: str) -> str:
    """
    Format host header for HTTP requests.

    Args:
        host: Hostname
        port: Port number
        scheme: URL scheme

    Returns:
        Formatted host header string
    """
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    if (scheme == "https" and port == 443) or (scheme == "http" and port == 80):
        return host
    return f"{host}:{port}"


def validate_port(port: Union[int, str]) -> int:
    """
    Validate and convert port to integer.

    Args:
        port: Port number (int or string)

    Returns:
        Port as integer

    Raises:
        ValueError: If port is invalid
    """
    try:
        port_int = int(port)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid port: {port}")

    if not (1 <= port_int <= 65535):
        raise ValueError(f"Port must be between 1 and 65535, got {port_int}")

    return port_int
