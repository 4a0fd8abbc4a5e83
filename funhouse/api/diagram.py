"""POST /api/diagram — side view of a revolution mirror with traced rays."""

from __future__ import annotations

from fastapi import APIRouter

from funhouse.engine.config import ProfileFamily
from funhouse.models.requests import DiagramRequest
from funhouse.models.responses import DiagramResponse, RayModel
from funhouse.optics.diagram import cross_section
from funhouse.svg.serializer import diagram_svg

router = APIRouter()


@router.post("/diagram", response_model=DiagramResponse)
async def diagram(req: DiagramRequest) -> DiagramResponse:
    scene = req.scene.to_config(family=ProfileFamily.REVOLUTION)
    section = cross_section(req.revolution.to_profile(), scene, samples=req.samples, rays=req.rays)
    return DiagramResponse(
        profile=section.profile,
        rays=[
            RayModel(angle=r.angle, hit=r.hit, landing=r.landing, behind=r.behind, missed=r.missed)
            for r in section.rays
        ],
        mirror_dist=section.mirror_dist,
        image_plane=section.image_plane,
        svg=diagram_svg(section),
    )
