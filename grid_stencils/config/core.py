"""
Core configuration classes for stencil arrays and mapping passes.

Configurations describe HOW a pass runs (worker count, fast paths, checks)
and which boundary/padding a stencil array defaults to. They never carry
grid data.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from grid_stencils.geometry.boundary.conditions import BCType, BoundaryCondition
from grid_stencils.geometry.boundary.padding import Padding, PaddingType

if TYPE_CHECKING:
    from numpy.typing import ArrayLike

    from grid_stencils.arrays.stencil_array import StencilArray
    from grid_stencils.geometry.protocol import StencilLike


class MapStencilConfig(BaseModel):
    """
    Configuration of a mapstencil / mapstencil_into pass.

    Attributes
    ----------
    n_workers : int
        Threads over which the center domain is split along axis 0
        (default: 1, serial)
    use_kernel_fast_path : bool
        Evaluate kernelproduct over a Kernel as a sum of shifted, weighted
        views instead of one call per cell (default: True)
    check_aux_shapes : bool
        Require auxiliary arrays to have the logical grid shape
        (default: True)
    """

    n_workers: int = Field(default=1, ge=1, le=256, description="Worker threads for one pass")
    use_kernel_fast_path: bool = Field(default=True, description="Vectorised kernelproduct over Kernel stencils")
    check_aux_shapes: bool = Field(default=True, description="Validate auxiliary array shapes")

    model_config = ConfigDict(validate_assignment=True, extra="forbid")


class StencilArrayConfig(BaseModel):
    """
    Default boundary and padding for building stencil arrays.

    Attributes
    ----------
    boundary : Literal["remove", "use", "wrap", "reflect"]
        Boundary policy (default: remove)
    padding : Literal["conditional", "halo_in", "halo_out"]
        Padding strategy (default: conditional)
    padval : Any
        Substitute value for the remove policy (default: 0)
    halo_width : int | None
        Halo width for the halo paddings, None for the stencil radius
    """

    boundary: Literal["remove", "use", "wrap", "reflect"] = "remove"
    padding: Literal["conditional", "halo_in", "halo_out"] = "conditional"
    padval: Any = 0
    halo_width: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    @model_validator(mode="after")
    def validate_pairing(self) -> StencilArrayConfig:
        """The use policy goes with halo_in padding and only with it."""
        if (self.boundary == "use") != (self.padding == "halo_in"):
            raise ValueError("boundary 'use' requires padding 'halo_in' and vice versa")
        if self.padding == "conditional" and self.halo_width is not None:
            raise ValueError("halo_width only applies to halo padding")
        return self

    def boundary_condition(self) -> BoundaryCondition:
        bc_type = BCType(self.boundary)
        return BoundaryCondition(bc_type, self.padval if bc_type is BCType.REMOVE else 0)

    def padding_policy(self) -> Padding:
        return Padding(PaddingType(self.padding), self.halo_width)

    def create_array(self, data: ArrayLike, stencil: StencilLike) -> StencilArray:
        """Build a StencilArray over data with this configuration."""
        from grid_stencils.arrays.stencil_array import StencilArray

        return StencilArray(data, stencil, boundary=self.boundary_condition(), padding=self.padding_policy())
