"""Association of regions between consecutive frames by keypoint votes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
from scipy.optimize import linear_sum_assignment

from contracts import AssociationMap, Correspondence, Frame, Region
from fusion.keypoints import keypoint_at
from log_config.logger import get_logger

logger = get_logger(__name__)

STRATEGIES = ("argmax", "hungarian")


@dataclass(frozen=True)
class AssociationResult:
    mapping: AssociationMap
    votes: np.ndarray = field(compare=False)
    best_votes: Dict[int, int] = field(default_factory=dict)
    curr_ids: List[int] = field(default_factory=list)
    prev_ids: List[int] = field(default_factory=list)

    def is_authoritative(self, curr_id: int) -> bool:
        """A mapping backed by zero votes carries no association signal."""
        return self.best_votes.get(curr_id, 0) > 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "mapping": {str(k): v for k, v in self.mapping.items()},
            "best_votes": {str(k): v for k, v in self.best_votes.items()},
            "curr_ids": list(self.curr_ids),
            "prev_ids": list(self.prev_ids),
            "votes": self.votes.tolist(),
        }


def _enclosing_region(regions: Sequence[Region], u: float, v: float) -> Optional[int]:
    """Position of the single region containing (u, v); None if zero or several do."""
    found: Optional[int] = None
    for i, region in enumerate(regions):
        if region.roi.contains(u, v):
            if found is not None:
                return None
            found = i
    return found


def build_vote_matrix(
    correspondences: Sequence[Correspondence], prev_frame: Frame, curr_frame: Frame
) -> np.ndarray:
    """Count correspondences per (current region, previous region) pair.

    Rows follow ``curr_frame.regions`` order and columns ``prev_frame.regions``.
    """
    votes = np.zeros((len(curr_frame.regions), len(prev_frame.regions)), dtype=int)
    for match in correspondences:
        curr_kpt = keypoint_at(curr_frame.keypoints, match.curr_idx, "current")
        prev_kpt = keypoint_at(prev_frame.keypoints, match.prev_idx, "previous")
        row = _enclosing_region(curr_frame.regions, curr_kpt.x, curr_kpt.y)
        if row is None:
            continue
        col = _enclosing_region(prev_frame.regions, prev_kpt.x, prev_kpt.y)
        if col is None:
            continue
        votes[row, col] += 1
    return votes


def _argmax_rows(votes: np.ndarray, curr_ids: List[int], prev_ids: List[int]):
    mapping: AssociationMap = {}
    best_votes: Dict[int, int] = {}
    for i, curr_id in enumerate(curr_ids):
        max_count = -1
        index = 0
        for j in range(len(prev_ids)):
            if votes[i, j] > max_count:
                max_count = int(votes[i, j])
                index = j
        mapping[curr_id] = prev_ids[index]
        best_votes[curr_id] = max_count
    return mapping, best_votes


def _assignment(votes: np.ndarray, curr_ids: List[int], prev_ids: List[int]):
    mapping: AssociationMap = {}
    best_votes: Dict[int, int] = {}
    rows, cols = linear_sum_assignment(votes, maximize=True)
    for r, c in zip(rows, cols):
        if votes[r, c] == 0:
            continue
        mapping[curr_ids[r]] = prev_ids[c]
        best_votes[curr_ids[r]] = int(votes[r, c])
    return mapping, best_votes


def match_bounding_boxes(
    correspondences: Sequence[Correspondence],
    prev_frame: Frame,
    curr_frame: Frame,
    strategy: str = "argmax",
) -> AssociationResult:
    """Map each current region to the previous region sharing the most correspondences.

    ``argmax`` picks the best column per row independently: every current
    region gets an entry (zero-vote rows map to the first previous region)
    and two current regions may claim the same previous region. ``hungarian``
    solves the assignment problem on the vote matrix, producing a one-to-one
    mapping that omits zero-vote pairs.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown association strategy {strategy!r}, expected one of {STRATEGIES}")

    curr_ids = [region.region_id for region in curr_frame.regions]
    prev_ids = [region.region_id for region in prev_frame.regions]
    votes = build_vote_matrix(correspondences, prev_frame, curr_frame)

    if not curr_ids or not prev_ids:
        return AssociationResult(mapping={}, votes=votes, curr_ids=curr_ids, prev_ids=prev_ids)

    if strategy == "hungarian":
        mapping, best_votes = _assignment(votes, curr_ids, prev_ids)
    else:
        mapping, best_votes = _argmax_rows(votes, curr_ids, prev_ids)

    weak = [curr_id for curr_id, count in best_votes.items() if count == 0]
    if weak:
        logger.debug(f"Regions {weak} associated without votes")
    logger.debug(
        f"Associated {len(mapping)}/{len(curr_ids)} regions of frame {curr_frame.frame_index} "
        f"from {int(votes.sum())} votes ({strategy})"
    )
    return AssociationResult(
        mapping=mapping,
        votes=votes,
        best_votes=best_votes,
        curr_ids=curr_ids,
        prev_ids=prev_ids,
    )
