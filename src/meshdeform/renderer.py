# renderer.py
from __future__ import annotations

import logging
from pathlib import Path

import moderngl
import numpy as np
import pygame

from meshdeform.camera import OrbitCamera
from meshdeform.mesh.surface import SurfaceMesh
from meshdeform.models import Transform

logger = logging.getLogger(__name__)

SHADER_DIR = Path(__file__).parent / "shaders"


def _gl_bytes(m: np.ndarray) -> bytes:
    # OpenGL expects column-major
    return np.ascontiguousarray(m.T, dtype="f4").tobytes()


class _MeshHandle:
    """GPU buffers for one surface mesh."""

    def __init__(
        self,
        ctx: moderngl.Context,
        prog: moderngl.Program,
        mesh: SurfaceMesh,
        transform: Transform,
        color: tuple[float, float, float],
    ) -> None:
        self.mesh = mesh
        self.transform = transform
        self.color = color
        self.uploaded_version = -1

        self.vbo = ctx.buffer(reserve=len(mesh.vertices) * 6 * 4, dynamic=True)
        self.ebo = ctx.buffer(mesh.faces.astype("i4").ravel().tobytes())
        self.vao = ctx.vertex_array(
            prog,
            [(self.vbo, "3f 3f", "in_position", "in_normal")],
            self.ebo,
        )

    def upload(self) -> None:
        if self.uploaded_version == self.mesh.version:
            return
        self.vbo.write(self.mesh.interleaved().tobytes())
        self.uploaded_version = self.mesh.version

    def release(self) -> None:
        self.vao.release()
        self.vbo.release()
        self.ebo.release()


# ------------------------
# Renderer
# ------------------------


class Renderer:
    def __init__(self, ctx: moderngl.Context, width: int = 800, height: int = 600):
        self.ctx = ctx
        self.ctx.enable(moderngl.DEPTH_TEST)

        self.width = width
        self.height = height
        self.wireframe = False
        self._meshes: list[_MeshHandle] = []

        pygame.font.init()
        self.font = pygame.font.SysFont("monospace", 18)

        # 3D program
        self.prog = self.ctx.program(
            vertex_shader=(SHADER_DIR / "mesh.vert").read_text(),
            fragment_shader=(SHADER_DIR / "mesh.frag").read_text(),
        )

        # UI program
        self.ui_prog = self.ctx.program(
            vertex_shader=(SHADER_DIR / "ui.vert").read_text(),
            fragment_shader=(SHADER_DIR / "ui.frag").read_text(),
        )

        # UI quad (updated every frame)
        self.ui_vbo = self.ctx.buffer(reserve=4 * 4 * 4)
        self.ui_vao = self.ctx.vertex_array(
            self.ui_prog,
            [(self.ui_vbo, "2f 2f", "in_pos", "in_uv")],
        )
        self.ui_texture: moderngl.Texture | None = None

    def add_mesh(
        self,
        mesh: SurfaceMesh,
        transform: Transform,
        color: tuple[float, float, float] = (0.95, 0.55, 0.6),
    ) -> None:
        self._meshes.append(_MeshHandle(self.ctx, self.prog, mesh, transform, color))
        logger.info("Renderer: added mesh with %d triangles", len(mesh.faces))

    def clear_meshes(self) -> None:
        for handle in self._meshes:
            handle.release()
        self._meshes.clear()

    def toggle_wireframe(self) -> bool:
        self.wireframe = not self.wireframe
        return self.wireframe

    # ------------------------
    # Draw
    # ------------------------

    def draw(self, camera: OrbitCamera, overlay_lines: list[str]) -> None:
        self.ctx.clear(0.1, 0.1, 0.15, 1.0)
        self.ctx.enable(moderngl.DEPTH_TEST)
        self.ctx.wireframe = self.wireframe

        view = camera.view()
        proj = camera.projection()
        self.prog["u_view"].write(_gl_bytes(view))  # type: ignore
        self.prog["u_proj"].write(_gl_bytes(proj))  # type: ignore

        light_world = np.array([5.0, 8.0, 3.0, 1.0], dtype=np.float32)
        light_view = (view @ light_world)[:3]
        self.prog["u_light_pos_view"].value = tuple(float(c) for c in light_view)  # type: ignore
        self.prog["u_light_color"].value = (1.0, 0.95, 0.9)  # type: ignore

        for handle in self._meshes:
            handle.upload()
            self.prog["u_model"].write(_gl_bytes(handle.transform.matrix()))  # type: ignore
            self.prog["u_color"].value = handle.color  # type: ignore
            handle.vao.render()

        self.ctx.wireframe = False
        self._draw_ui_overlay(overlay_lines)
        pygame.display.flip()

    # ------------------------
    # UI Overlay
    # ------------------------

    def _surface_to_texture(self, surface: pygame.Surface) -> moderngl.Texture:
        surface = pygame.transform.flip(surface, False, True)
        data = pygame.image.tobytes(surface, "RGBA", False)

        tex = self.ctx.texture(surface.get_size(), 4, data)
        tex.filter = (moderngl.NEAREST, moderngl.NEAREST)
        tex.swizzle = "RGBA"
        return tex

    def _draw_ui_overlay(self, lines: list[str]) -> None:
        if not lines:
            return

        self.ctx.disable(moderngl.DEPTH_TEST)
        self.ctx.enable(moderngl.BLEND)
        self.ctx.blend_func = moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA

        line_h = self.font.get_height()
        w = max(self.font.size(line)[0] for line in lines)
        h = line_h * len(lines)

        surface = pygame.Surface((w, h), pygame.SRCALPHA)

        y = 0
        for line in lines:
            surface.blit(self.font.render(line, True, (220, 220, 220)), (0, y))
            y += line_h

        if self.ui_texture:
            self.ui_texture.release()
        self.ui_texture = self._surface_to_texture(surface)
        self.ui_texture.use(0)

        # Top-left quad in NDC
        margin = 10
        ndc_w = 2.0 * w / self.width
        ndc_h = 2.0 * h / self.height
        mx = 2.0 * margin / self.width
        my = 2.0 * margin / self.height

        x0 = -1.0 + mx
        y0 = 1.0 - my
        x1 = x0 + ndc_w
        y1 = y0 - ndc_h

        quad = np.array(
            [
                [x0, y0, 0.0, 1.0],
                [x0, y1, 0.0, 0.0],
                [x1, y0, 1.0, 1.0],
                [x1, y1, 1.0, 0.0],
            ],
            dtype="f4",
        )

        self.ui_vbo.write(quad.tobytes())
        self.ui_prog["u_texture"].value = 0  # type: ignore
        self.ui_vao.render(mode=moderngl.TRIANGLE_STRIP)
        self.ctx.disable(moderngl.BLEND)
