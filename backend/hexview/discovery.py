from __future__ import annotations

import logging
import socket
from typing import Optional, Tuple

from zeroconf import ServiceInfo, Zeroconf

logger = logging.getLogger(__name__)

SERVICE_TYPE = "_hexview._tcp.local."

ServiceHandle = Optional[Tuple[Zeroconf, ServiceInfo]]


def _local_ip() -> str:
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # UDP connect sends nothing; it only picks the outbound interface
        sock.connect(("8.8.8.8", 80))
        return sock.getsockname()[0]
    except OSError:
        return "127.0.0.1"
    finally:
        sock.close()


def service_info(port: int, ip: str, hostname: str) -> ServiceInfo:
    return ServiceInfo(
        SERVICE_TYPE,
        f"hexview-{hostname}.{SERVICE_TYPE}",
        addresses=[socket.inet_aton(ip)],
        port=port,
        properties={"app": "hexview", "api": "v1"},
    )


def start_discovery(port: int) -> ServiceHandle:
    hostname = socket.gethostname().split(".")[0]
    info = service_info(port, _local_ip(), hostname)
    zeroconf = Zeroconf()
    try:
        zeroconf.register_service(info)
    except Exception as exc:
        logger.warning("Could not advertise %s on port %d: %s", SERVICE_TYPE, port, exc)
        zeroconf.close()
        return None
    logger.info("Advertising %s on port %d", info.name, port)
    return zeroconf, info


def stop_discovery(handle: ServiceHandle) -> None:
    if not handle:
        return
    zeroconf, info = handle
    try:
        zeroconf.unregister_service(info)
    except Exception as exc:
        logger.warning("Could not withdraw %s: %s", info.name, exc)
    finally:
        zeroconf.close()
