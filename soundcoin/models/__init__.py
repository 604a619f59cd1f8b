from soundcoin.models.ad import Ad, AdView
from soundcoin.models.base import Base
from soundcoin.models.ledger import CoinTransaction
from soundcoin.models.profile import Profile
from soundcoin.models.redemption import Redemption
from soundcoin.models.track import Track

__all__ = [
    "Ad",
    "AdView",
    "Base",
    "CoinTransaction",
    "Profile",
    "Redemption",
    "Track",
]
