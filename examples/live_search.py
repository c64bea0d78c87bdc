"""Example: narrow a city found through Nominatim with POIs from Overpass."""

import logging

from seekarea import NominatimGeocoder, OverpassPoiProvider, Session, describe_entry, geodesic_area_km2


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

    session = Session(poi_provider=OverpassPoiProvider(), geocoder=NominatimGeocoder())
    print(session.run_search("Vienna, Austria").message)
    if not session.search_results:
        return
    session.select_search_result(session.search_results[0])

    session.set_seeker(16.3725, 48.2083)
    for result in (
        session.apply_radar(3.0, True),
        session.apply_matching("museum", True),
        session.apply_measuring("trainstation", closer=False),
        session.apply_region_matching("city", True),
    ):
        print(("OK  " if result.ok else "ERR ") + result.message)

    print("\nHistory:")
    for entry in session.history:
        print(f"  {describe_entry(entry)}")
    if session.candidate is not None:
        print(f"Remaining: {geodesic_area_km2(session.candidate):.1f} km^2")
    session.close()


if __name__ == "__main__":
    main()
