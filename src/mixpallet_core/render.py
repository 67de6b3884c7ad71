from __future__ import annotations

from typing import Optional

from matplotlib.figure import Figure
from mpl_toolkits.mplot3d import Axes3D
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from .models import MixedPalletResult, PalletSpec, Placement

PALLET_COLOR = "#a0784a"


# Corner indices of each face; corner i has bit 0 for x, bit 1 for y, bit 2 for z.
_BOX_FACES = (
    (0, 1, 3, 2),  # bottom
    (4, 5, 7, 6),  # top
    (0, 1, 5, 4),  # front
    (1, 3, 7, 5),  # right
    (2, 3, 7, 6),  # back
    (0, 2, 6, 4),  # left
)


def add_box(
    ax: Axes3D,
    x: float,
    y: float,
    z: float,
    dx: float,
    dy: float,
    dz: float,
    color: str = "red",
    alpha: float = 0.2,
) -> Poly3DCollection:
    """Draw a 3D box using Poly3DCollection."""
    corners = [
        (x + dx * (i & 1), y + dy * ((i >> 1) & 1), z + dz * ((i >> 2) & 1))
        for i in range(8)
    ]
    verts = [[corners[i] for i in face] for face in _BOX_FACES]
    poly = Poly3DCollection(verts, facecolors=color, edgecolors="black", alpha=alpha)
    ax.add_collection3d(poly)
    return poly


def _draw_placement(ax, placement: Placement, alpha: float):
    # plot axes: x along pallet length, y along pallet width, z up
    x0, z0, length, width = placement.footprint
    return add_box(
        ax,
        x0,
        z0,
        placement.base_height,
        length,
        width,
        placement.dimensions[2],
        color=placement.color,
        alpha=alpha,
    )


def render_placements(
    result: MixedPalletResult,
    pallet: PalletSpec,
    *,
    title: Optional[str] = None,
    alpha: float = 0.6,
) -> Figure:
    """3D view of the pallet deck and every placed box."""
    fig = Figure(figsize=(8, 6))
    ax = fig.add_subplot(111, projection="3d")

    if pallet.height > 0:
        add_box(
            ax,
            -pallet.length / 2,
            -pallet.width / 2,
            0,
            pallet.length,
            pallet.width,
            pallet.height,
            color=PALLET_COLOR,
            alpha=0.4,
        )
    for placement in result.placements:
        _draw_placement(ax, placement, alpha)

    top = max(pallet.max_height, result.total_height, 1.0)
    ax.set_xlim(-pallet.length / 2, pallet.length / 2)
    ax.set_ylim(-pallet.width / 2, pallet.width / 2)
    ax.set_zlim(0, top)
    ax.set_box_aspect((max(pallet.length, 1e-6), max(pallet.width, 1e-6), top))
    ax.set_xlabel("Length")
    ax.set_ylabel("Width")
    ax.set_zlabel("Height")
    ax.set_title(title or f"{result.total_units} units, height {result.total_height:.2f}")
    return fig


def save_rendering(
    result: MixedPalletResult,
    pallet: PalletSpec,
    path: str,
    *,
    dpi: int = 100,
    title: Optional[str] = None,
) -> str:
    fig = render_placements(result, pallet, title=title)
    fig.savefig(path, dpi=dpi)
    return path
