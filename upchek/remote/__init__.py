"""Remote aggregation — fetch and poll peer result sets."""

from .client import PeerClient
from .models import ResultPayload
from .poller import PeerPoller
