"""
Jenkins Discovery.

Jenkins listens for UDP datagrams on port 33848 and answers any packet
with an XML description of itself. ``discover`` sends one packet (to a
single host or a broadcast address) and races the first reply against a
timeout: whichever finishes first wins, the other is cancelled, and the
socket is closed on every path. There is no retry.
"""

import asyncio

from nestor.core.exceptions import DiscoveryTimeoutError, TransportError
from nestor.core.logging import get_logger
from nestor.jenkins.parsers import parse_discovery_reply

logger = get_logger(__name__)

DISCOVERY_PORT = 33848
DISCOVERY_PAYLOAD = b"Long live Jenkins!"
DEFAULT_TIMEOUT = 5.0


class _DiscoveryProtocol(asyncio.DatagramProtocol):
    """Resolves ``reply`` with the first datagram or socket error."""

    def __init__(self, reply: asyncio.Future) -> None:
        self.reply = reply

    def datagram_received(self, data: bytes, addr: tuple) -> None:
        if not self.reply.done():
            logger.debug("Discovery reply received", extra={"address": addr[0]})
            self.reply.set_result(data)

    def error_received(self, exc: Exception) -> None:
        if not self.reply.done():
            self.reply.set_exception(TransportError(f"Discovery socket error: {exc}"))


async def discover(
    host: str = "localhost",
    port: int = DISCOVERY_PORT,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, str]:
    """
    Look for a Jenkins instance on ``host``.

    Args:
        host: Hostname, IP, or broadcast address (e.g. 255.255.255.255)
        port: Jenkins UDP discovery port
        timeout: Seconds to wait for a reply

    Returns:
        The reply's fields, e.g. {"version": "2.426", "url": "http://ci:8080/"}

    Raises:
        DiscoveryTimeoutError: No reply within ``timeout``
        TransportError: The datagram could not be sent or the socket failed
        NotAJenkinsServerError: The reply is not Jenkins' XML
    """
    loop = asyncio.get_running_loop()
    reply: asyncio.Future = loop.create_future()

    try:
        transport, _ = await loop.create_datagram_endpoint(
            lambda: _DiscoveryProtocol(reply),
            local_addr=("0.0.0.0", 0),
            allow_broadcast=True,
        )
    except OSError as e:
        raise TransportError(f"Unable to open discovery socket: {e}") from e

    timer = asyncio.ensure_future(asyncio.sleep(timeout))
    try:
        try:
            transport.sendto(DISCOVERY_PAYLOAD, (host, port))
        except OSError as e:
            raise TransportError(f"Unable to send discovery packet to {host}: {e}") from e

        done, _ = await asyncio.wait({reply, timer}, return_when=asyncio.FIRST_COMPLETED)
        if reply not in done:
            logger.debug("Discovery timed out", extra={"host": host, "timeout": timeout})
            raise DiscoveryTimeoutError(host)
        payload = reply.result()
    finally:
        for pending in (reply, timer):
            if not pending.done():
                pending.cancel()
        transport.close()

    return parse_discovery_reply(payload)
