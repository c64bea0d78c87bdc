"""GeoJSON output of the candidate area and the seeker position."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .algebra import AnyPoly, to_geojson
from .primitives import geodesic_area_km2
from .providers.base import SeekerPosition

logger = logging.getLogger(__name__)


def feature_collection(candidate: Optional[AnyPoly], seeker: Optional[SeekerPosition]) -> Dict[str, Any]:
    features: List[Dict[str, Any]] = []
    if candidate is not None:
        features.append(
            {
                "type": "Feature",
                "properties": {"role": "candidate", "area_km2": round(geodesic_area_km2(candidate), 3)},
                "geometry": to_geojson(candidate),
            }
        )
    if seeker is not None:
        features.append(
            {
                "type": "Feature",
                "properties": {"role": "seeker", "accuracy_m": seeker.accuracy_m, "timestamp": seeker.timestamp},
                "geometry": {"type": "Point", "coordinates": [seeker.lon, seeker.lat]},
            }
        )
    return {"type": "FeatureCollection", "features": features}


class GeoJSONRenderer:
    """Rewrites *path* with the current state on every render call."""

    def __init__(self, path: Union[str, Path], indent: Optional[int] = None) -> None:
        self.path = Path(path)
        self.indent = indent
        self.renders = 0

    def render(self, candidate: Optional[AnyPoly], seeker: Optional[SeekerPosition]) -> None:
        payload = feature_collection(candidate, seeker)
        with open(self.path, "w", encoding="utf-8") as fout:
            json.dump(payload, fout, indent=self.indent)
        self.renders += 1
        logger.debug("Rendered %d feature(s) to %s", len(payload["features"]), self.path)


__all__ = ["GeoJSONRenderer", "feature_collection"]
