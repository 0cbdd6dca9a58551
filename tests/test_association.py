import pytest

from contracts import Correspondence, Frame, Keypoint, Rect, Region
from fusion.association import build_vote_matrix, match_bounding_boxes

LEFT = Rect(0.0, 0.0, 100.0, 100.0)
RIGHT = Rect(200.0, 0.0, 100.0, 100.0)
IN_LEFT = (50.0, 50.0)
IN_RIGHT = (250.0, 50.0)
OUTSIDE = (500.0, 500.0)


def _frame_pair(prev_regions, curr_regions, links):
    """Build a frame pair from ``(prev_position, curr_position)`` links matched one to one."""
    prev = Frame(
        frame_index=0,
        keypoints=[Keypoint(x=p[0], y=p[1], index=i) for i, (p, _) in enumerate(links)],
        regions=[Region(region_id=rid, roi=roi) for rid, roi in prev_regions],
    )
    curr = Frame(
        frame_index=1,
        keypoints=[Keypoint(x=c[0], y=c[1], index=i) for i, (_, c) in enumerate(links)],
        regions=[Region(region_id=rid, roi=roi) for rid, roi in curr_regions],
    )
    matches = [Correspondence(prev_idx=i, curr_idx=i, distance=1.0) for i in range(len(links))]
    return prev, curr, matches


def test_majority_vote_wins() -> None:
    links = [(IN_LEFT, IN_LEFT)] * 3 + [(IN_RIGHT, IN_LEFT)] + [(IN_RIGHT, IN_RIGHT)] * 2
    prev, curr, matches = _frame_pair([(5, LEFT), (7, RIGHT)], [(1, LEFT), (2, RIGHT)], links)

    result = match_bounding_boxes(matches, prev, curr)

    assert result.mapping == {1: 5, 2: 7}
    assert result.best_votes == {1: 3, 2: 2}
    assert result.is_authoritative(1)


def test_vote_matrix_rows_follow_current_regions() -> None:
    links = [(IN_LEFT, IN_RIGHT), (IN_RIGHT, IN_RIGHT), (IN_RIGHT, IN_LEFT), (OUTSIDE, IN_LEFT)]
    prev, curr, matches = _frame_pair([(5, LEFT), (7, RIGHT)], [(1, LEFT), (2, RIGHT)], links)

    votes = build_vote_matrix(matches, prev, curr)

    assert votes.tolist() == [[0, 1], [1, 1]]


def test_tie_prefers_first_previous_region() -> None:
    links = [(IN_LEFT, IN_LEFT)] * 2 + [(IN_RIGHT, IN_LEFT)] * 2
    prev, curr, matches = _frame_pair([(5, LEFT), (7, RIGHT)], [(1, LEFT)], links)

    assert match_bounding_boxes(matches, prev, curr).mapping == {1: 5}


def test_zero_vote_region_is_non_authoritative() -> None:
    links = [(IN_RIGHT, IN_LEFT)] * 2
    prev, curr, matches = _frame_pair([(5, LEFT), (7, RIGHT)], [(1, LEFT), (2, RIGHT)], links)

    result = match_bounding_boxes(matches, prev, curr)

    assert result.mapping == {1: 7, 2: 5}
    assert result.best_votes[2] == 0
    assert not result.is_authoritative(2)


def test_argmax_mapping_may_not_be_injective() -> None:
    links = [(IN_LEFT, IN_LEFT)] * 3 + [(IN_LEFT, IN_RIGHT)] * 2 + [(IN_RIGHT, IN_RIGHT)]
    prev, curr, matches = _frame_pair([(5, LEFT), (7, RIGHT)], [(1, LEFT), (2, RIGHT)], links)

    assert match_bounding_boxes(matches, prev, curr).mapping == {1: 5, 2: 5}


def test_hungarian_mapping_is_injective() -> None:
    links = [(IN_LEFT, IN_LEFT)] * 3 + [(IN_LEFT, IN_RIGHT)] * 2 + [(IN_RIGHT, IN_RIGHT)]
    prev, curr, matches = _frame_pair([(5, LEFT), (7, RIGHT)], [(1, LEFT), (2, RIGHT)], links)

    result = match_bounding_boxes(matches, prev, curr, strategy="hungarian")

    assert result.mapping == {1: 5, 2: 7}
    assert result.best_votes == {1: 3, 2: 1}


def test_hungarian_drops_zero_vote_regions() -> None:
    links = [(IN_LEFT, IN_LEFT)] * 2
    prev, curr, matches = _frame_pair([(5, LEFT), (7, RIGHT)], [(1, LEFT), (2, RIGHT)], links)

    result = match_bounding_boxes(matches, prev, curr, strategy="hungarian")

    assert result.mapping == {1: 5}


def test_keypoint_in_overlapping_regions_casts_no_vote() -> None:
    overlap = Rect(50.0, 0.0, 100.0, 100.0)
    links = [((75.0, 50.0), IN_LEFT)]
    prev, curr, matches = _frame_pair([(5, LEFT), (6, overlap)], [(1, LEFT)], links)

    result = match_bounding_boxes(matches, prev, curr)

    assert int(result.votes.sum()) == 0
    assert not result.is_authoritative(1)


def test_no_previous_regions_gives_empty_mapping() -> None:
    prev, curr, matches = _frame_pair([], [(1, LEFT)], [(IN_LEFT, IN_LEFT)])
    result = match_bounding_boxes(matches, prev, curr)
    assert result.mapping == {}
    assert result.votes.shape == (1, 0)


def test_association_is_repeatable() -> None:
    links = [(IN_LEFT, IN_LEFT)] * 3 + [(IN_RIGHT, IN_RIGHT)]
    prev, curr, matches = _frame_pair([(5, LEFT), (7, RIGHT)], [(1, LEFT), (2, RIGHT)], links)

    first = match_bounding_boxes(matches, prev, curr)
    second = match_bounding_boxes(matches, prev, curr)

    assert first.mapping == second.mapping
    assert first.votes.tolist() == second.votes.tolist()


def test_unknown_strategy_raises() -> None:
    prev, curr, matches = _frame_pair([(5, LEFT)], [(1, LEFT)], [(IN_LEFT, IN_LEFT)])
    with pytest.raises(ValueError):
        match_bounding_boxes(matches, prev, curr, strategy="greedy")
