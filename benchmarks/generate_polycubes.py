#!/usr/bin/env python3
"""Generate benchmark polycubes covering every unfolding strategy.

Flat shapes are drawn as boolean masks (row 0 = lowest y) and written as
``x y z`` triples. Run once to populate benchmarks/polycubes/.
"""

from pathlib import Path

import numpy as np

OUT = Path(__file__).parent / "polycubes"
OUT.mkdir(exist_ok=True)


def mask_to_triples(mask: np.ndarray, z: int = 0) -> np.ndarray:
    ys, xs = np.nonzero(mask)
    return np.column_stack([xs, ys, np.full_like(xs, z)])


def save(triples: np.ndarray, name: str) -> None:
    path = OUT / f"{name}.txt"
    lines = [" ".join(str(int(v)) for v in row) for row in triples]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    print(f"  {name}: {len(triples)} voxels → {path.name}")


def make_single():
    """1. One voxel: smallest closed surface."""
    return np.array([[0, 0, 0]])


def make_square():
    """2. 2x2 slab: no holes, has a cycle."""
    return mask_to_triples(np.ones((2, 2), dtype=bool))


def make_ring():
    """3. 3x3 ring: one unit hole."""
    mask = np.ones((3, 3), dtype=bool)
    mask[1, 1] = False
    return mask_to_triples(mask)


def make_frame():
    """4. 5x5 frame: one 3x3 hole."""
    mask = np.ones((5, 5), dtype=bool)
    mask[1:4, 1:4] = False
    return mask_to_triples(mask)


def make_sieve():
    """5. 7x7 slab with nine unit holes on a lattice."""
    mask = np.ones((7, 7), dtype=bool)
    mask[1::2, 1::2] = False
    return mask_to_triples(mask)


def make_window():
    """6. 8x6 slab with two wide holes."""
    mask = np.ones((6, 8), dtype=bool)
    mask[1:5, 1:3] = False
    mask[2:4, 4:7] = False
    return mask_to_triples(mask)


def make_comb():
    """7. Tree with four-way junctions: orthotree."""
    mask = np.zeros((5, 9), dtype=bool)
    mask[2, :] = True
    mask[:, 2] = True
    mask[:, 6] = True
    return mask_to_triples(mask)


def make_wall():
    """8. Staircase standing in the y-z plane (x constant)."""
    triples = [(3, y, z) for z in range(4) for y in range(z + 1)]
    return np.array(triples)


def make_mixed_holes():
    """9. One unit hole next to one wide hole: unsupported."""
    mask = np.ones((5, 7), dtype=bool)
    mask[2, 1] = False
    mask[1:4, 3:6] = False
    return mask_to_triples(mask)


def make_two_layers():
    """10. 2x2x2 block: not a single layer."""
    return np.array([(x, y, z) for x in range(2) for y in range(2) for z in range(2)])


def make_diagonal_chain():
    """11. Three unit holes in a diagonal chain: no stripe plan, unsupported."""
    mask = np.ones((5, 5), dtype=bool)
    for x, y in [(1, 1), (2, 2), (3, 1)]:
        mask[y, x] = False
    return mask_to_triples(mask)


GENERATORS = [
    ("01_single", make_single),
    ("02_square", make_square),
    ("03_ring", make_ring),
    ("04_frame", make_frame),
    ("05_sieve", make_sieve),
    ("06_window", make_window),
    ("07_comb", make_comb),
    ("08_wall", make_wall),
    ("09_mixed_holes", make_mixed_holes),
    ("10_two_layers", make_two_layers),
    ("11_diagonal_chain", make_diagonal_chain),
]


if __name__ == "__main__":
    print(f"Generating {len(GENERATORS)} benchmark polycubes → {OUT}/")
    for name, gen_fn in GENERATORS:
        save(gen_fn(), name)
    print("Done.")
