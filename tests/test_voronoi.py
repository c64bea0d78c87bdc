import math
import random

from shapely.geometry import box

from seekarea.voronoi import locate_cell, voronoi_cells


def test_two_sites_split_clip_box_in_half():
    clip = box(-1, -1, 3, 1)
    cells = voronoi_cells([(0.0, 0.0), (2.0, 0.0)], clip)

    assert len(cells) == 2
    assert math.isclose(cells[0].area, 4.0, rel_tol=1e-9)
    assert math.isclose(cells[1].area, 4.0, rel_tol=1e-9)
    assert math.isclose(cells[0].bounds[2], 1.0, abs_tol=1e-9)
    assert locate_cell(cells, (0.5, 0.0)) == 0
    assert locate_cell(cells, (1.5, 0.0)) == 1


def test_cells_tile_the_clip_region():
    rng = random.Random(11)
    sites = [(rng.uniform(0, 10), rng.uniform(0, 10)) for _ in range(12)]
    clip = box(0, 0, 10, 10)
    cells = voronoi_cells(sites, clip)

    assert math.isclose(sum(c.area for c in cells if c is not None), clip.area, rel_tol=1e-6)
    for idx, site in enumerate(sites):
        assert locate_cell(cells, site) == idx


def test_sites_outside_clip_still_partition_it():
    clip = box(0, 0, 1, 1)
    cells = voronoi_cells([(-5.0, 0.5), (3.0, 0.5)], clip)
    assert cells[0] is None
    assert math.isclose(cells[1].area, 1.0, rel_tol=1e-9)


def test_degenerate_site_counts():
    clip = box(0, 0, 1, 1)
    assert voronoi_cells([], clip) == []
    single = voronoi_cells([(0.5, 0.5)], clip)
    assert len(single) == 1
    assert single[0].equals(clip)


def test_locate_cell_outside_every_cell():
    cells = voronoi_cells([(0.2, 0.5), (0.8, 0.5)], box(0, 0, 1, 1))
    assert locate_cell(cells, (5.0, 5.0)) is None
