"""Lidar/camera fusion: projection, clustering, correspondence filtering, association."""

from .association import AssociationResult, build_vote_matrix, match_bounding_boxes
from .clustering import ClusteringStats, cluster_lidar_with_roi
from .keypoints import cluster_kpt_matches_with_roi
from .projection import project_point, project_points
from .roi import RangeCrop, crop_range_points

__all__ = [
    "AssociationResult",
    "ClusteringStats",
    "RangeCrop",
    "build_vote_matrix",
    "cluster_kpt_matches_with_roi",
    "cluster_lidar_with_roi",
    "crop_range_points",
    "match_bounding_boxes",
    "project_point",
    "project_points",
]
