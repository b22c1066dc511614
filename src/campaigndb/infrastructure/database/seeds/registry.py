"""Ordered list of the seeds shipped with the package."""

from typing import List

from campaigndb.domain.types import Seed
from campaigndb.infrastructure.database.seeds import basic_data, campaign_data


def default_seeds() -> List[Seed]:
    """Seeds in dependency order: campaign_data needs basic_data's rows."""
    return [basic_data.SEED, campaign_data.SEED]
