"""
Seller Resolver

A basket's seller can come from three places. They are checked in a fixed
order and the first hit wins:

    1. BASKET  - seller id on the first cart line
    2. SESSION - seller previously selected in this session
    3. PROFILE - seller whose profile is currently displayed

The basket comes first because it can outlive the screen that set the
session seller; its own seller id keeps orders from mixing sellers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from orderflow.core.exceptions import SellerResolutionError
from orderflow.schemas import CartLine


class SellerSource(str, Enum):
    BASKET = "basket"
    SESSION = "session"
    PROFILE = "profile"


@dataclass(frozen=True)
class ResolvedSeller:
    seller_id: int
    source: SellerSource


def _valid(seller_id: Optional[int]) -> bool:
    return seller_id is not None and seller_id > 0


def resolve_seller(
    lines: Sequence[CartLine],
    session_seller_id: Optional[int] = None,
    profile_seller_id: Optional[int] = None,
) -> Optional[ResolvedSeller]:
    """Return the winning seller id tagged with its source, or None."""
    if lines and _valid(lines[0].caterer_id):
        return ResolvedSeller(lines[0].caterer_id, SellerSource.BASKET)
    if _valid(session_seller_id):
        return ResolvedSeller(session_seller_id, SellerSource.SESSION)
    if _valid(profile_seller_id):
        return ResolvedSeller(profile_seller_id, SellerSource.PROFILE)
    return None


def require_seller(
    lines: Sequence[CartLine],
    session_seller_id: Optional[int] = None,
    profile_seller_id: Optional[int] = None,
) -> ResolvedSeller:
    """
    Like ``resolve_seller`` but fails instead of returning None.

    Raises:
        SellerResolutionError: No source yields a seller; the caller should
            send the user back to seller selection
    """
    resolved = resolve_seller(lines, session_seller_id, profile_seller_id)
    if resolved is None:
        raise SellerResolutionError()
    return resolved
