"""
Medal tier service.
Maps a monthly point total to a medal and the progress towards the next one.
"""
from prisma_points.constants import MEDAL_TIERS, MEDAL_DIAMOND
from prisma_points.schemas import MedalProgress

# Ascending order, used to find the next tier
_TIERS_ASCENDING = list(reversed(MEDAL_TIERS))
_THRESHOLDS = dict(MEDAL_TIERS)


class MedalService:
    """Pure medal calculations, no database access"""

    @staticmethod
    def get_medal(points: int) -> str:
        """Medal whose lower bound is the greatest one not above points"""
        for medal, threshold in MEDAL_TIERS:
            if points >= threshold:
                return medal
        # Negative totals never happen by contract; treat them as the lowest tier
        return _TIERS_ASCENDING[0][0]

    @staticmethod
    def threshold(medal: str) -> int:
        """Inclusive lower bound of a medal"""
        return _THRESHOLDS[medal]

    @staticmethod
    def is_upgrade(old_medal: str, new_medal: str) -> bool:
        """True when new_medal sits strictly above old_medal"""
        return _THRESHOLDS[new_medal] > _THRESHOLDS[old_medal]

    @staticmethod
    def get_progress(points: int) -> MedalProgress:
        """
        Progress within the current medal band.

        progress = (points - tier_start) / (next_tier_start - tier_start) * 100
        Diamond has no next tier and always reports 100%.
        """
        medal = MedalService.get_medal(points)
        tier_start = _THRESHOLDS[medal]

        if medal == MEDAL_DIAMOND:
            return MedalProgress(
                points=points,
                medal=medal,
                next_medal=None,
                points_needed=0,
                progress=100.0,
                tier_start=tier_start
            )

        names = [name for name, _ in _TIERS_ASCENDING]
        next_medal = names[names.index(medal) + 1]
        tier_end = _THRESHOLDS[next_medal]

        return MedalProgress(
            points=points,
            medal=medal,
            next_medal=next_medal,
            points_needed=tier_end - points,
            progress=(points - tier_start) / (tier_end - tier_start) * 100,
            tier_start=tier_start
        )
