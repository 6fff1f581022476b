"""Clearance-time rule for ponding readings."""

from typing import Optional

from spellwatch.utils.errors import ClearanceRequiredError


class ClearanceRule:
    """An operator must record how long it took to clear standing water
    before a point's ponding can drop from a positive value to zero."""

    @staticmethod
    def requires_clearance(old_ponding: float, new_ponding: float, cleared_in_time: Optional[str]) -> bool:
        return (old_ponding or 0) > 0 and new_ponding == 0 and not (cleared_in_time or "").strip()

    def validate(
        self,
        old_ponding: float,
        new_ponding: float,
        cleared_in_time: Optional[str],
        point_name: str,
    ) -> None:
        if self.requires_clearance(old_ponding, new_ponding, cleared_in_time):
            raise ClearanceRequiredError([point_name])


clearance_rule = ClearanceRule()
