"""Client side — preloading, hydration and the mounted lazy tree."""

from duet.client.bootstrap import Bootstrap, decode_state, encode_state, read_bootstrap
from duet.client.cancel import CancelToken
from duet.client.mount import ClientMount
from duet.client.preloader import Preloader

__all__ = [
    "Bootstrap",
    "CancelToken",
    "ClientMount",
    "Preloader",
    "decode_state",
    "encode_state",
    "read_bootstrap",
]
