import argparse
import logging
import math
import sys
from typing import Optional, Sequence

import moderngl
import pygame

from meshdeform.camera import OrbitCamera
from meshdeform.collision import MeshCollider
from meshdeform.config import DeformerConfig, InputConfig
from meshdeform.exceptions import MeshDeformError
from meshdeform.input_adapter import ForceInputAdapter
from meshdeform.logging_config import setup_logging
from meshdeform.mesh.hemisphere import generate_hemisphere, generate_sphere
from meshdeform.mesh.surface import SurfaceMesh
from meshdeform.models import Ray, Transform
from meshdeform.picking import Picker
from meshdeform.renderer import Renderer
from meshdeform.scene import Scene, SceneObject, Scheduler
from meshdeform.solver_numpy import DeformableBody

logger = logging.getLogger("meshdeform.sim")


class PygameTriggers:
    """Left mouse inflates, right mouse pinches, pointer ray through the cursor."""

    def __init__(self, camera: OrbitCamera) -> None:
        self.camera = camera

    def primary_held(self) -> bool:
        return bool(pygame.mouse.get_pressed()[0])

    def secondary_held(self) -> bool:
        return bool(pygame.mouse.get_pressed()[2])

    def pointer_ray(self) -> Ray:
        x, y = pygame.mouse.get_pos()
        return self.camera.screen_point_to_ray(x, y)


class DeformerWorld:
    """Scene, scheduler and picker for the demo objects."""

    def __init__(self, config: DeformerConfig) -> None:
        self.config = config
        self.scene = Scene()
        self.scheduler = Scheduler()
        self.picker = Picker(self.scene)
        self.objects: list[SceneObject] = []

    def spawn(self, name: str, mesh: SurfaceMesh, transform: Transform) -> SceneObject:
        obj = SceneObject(name, transform)
        collider = MeshCollider(mesh.vertices, mesh.faces)
        body = DeformableBody.from_positions(
            mesh.vertices, self.config, mesh_sink=mesh, collider_sink=collider
        )
        self.scene.add(obj, mesh, collider, body)
        self.scheduler.add_body(body)
        self.objects.append(obj)
        return obj

    def body_of(self, obj: SceneObject) -> DeformableBody:
        body = self.scene.get_component(obj, DeformableBody)
        assert body is not None
        return body

    def set_config(self, config: DeformerConfig) -> None:
        self.config = config
        for obj in self.objects:
            self.body_of(obj).config = config

    def reset(self) -> None:
        """Throw every body away and start again from the rest shapes."""
        for obj in self.objects:
            old = self.body_of(obj)
            mesh = self.scene.get_component(obj, SurfaceMesh)
            collider = self.scene.get_component(obj, MeshCollider)
            assert mesh is not None and collider is not None

            body = DeformableBody.from_positions(
                old.original, self.config, mesh_sink=mesh, collider_sink=collider
            )
            mesh.set_vertices(body.original.copy())
            mesh.recalculate_normals()
            collider.rebuild(body.original)

            self.scene.attach(obj, body)
            self.scheduler.replace_body(old, body)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Jiggly soft-body mesh deformer demo")
    parser.add_argument(
        "--shape", choices=["sphere", "hemisphere", "both"], default="both", help="Meshes to spawn"
    )
    parser.add_argument("--rings", type=int, default=24, help="Latitude rings per mesh")
    parser.add_argument("--spring-force", type=float, default=DeformerConfig.spring_force)
    parser.add_argument("--damping", type=float, default=DeformerConfig.damping)
    parser.add_argument(
        "--collider-interval",
        type=float,
        default=DeformerConfig.collider_update_interval,
        help="Seconds between collision proxy rebuilds",
    )
    parser.add_argument("--force", type=float, default=10.0, help="Pick force magnitude")
    parser.add_argument("--physics-fps", type=int, default=120, help="Fixed physics tick rate")
    parser.add_argument("--width", type=int, default=1000)
    parser.add_argument("--height", type=int, default=800)
    parser.add_argument("--log", default=None, help="Optional log file")
    parser.add_argument("--debug", action="store_true", help="Verbose console logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO, log_file=args.log)

    physics_dt = 1.0 / args.physics_fps
    try:
        config = DeformerConfig(
            spring_force=args.spring_force,
            damping=args.damping,
            collider_update_interval=args.collider_interval,
            fixed_dt=physics_dt,
        )
        input_config = InputConfig(force=args.force)
    except MeshDeformError as exc:
        logger.error("Bad parameters: %s", exc)
        sys.exit(2)

    if not config.is_stable_for(physics_dt):
        logger.warning("spring/damping too stiff for %d Hz; expect the mesh to blow up", args.physics_fps)

    # 1. Meshes
    world = DeformerWorld(config)
    segments = math.ceil(args.rings * 2)
    meshes: list[tuple[SurfaceMesh, Transform]] = []
    if args.shape in ("sphere", "both"):
        verts, faces = generate_sphere(radius=1.0, rings=args.rings, segments=segments)
        x = -1.3 if args.shape == "both" else 0.0
        meshes.append((SurfaceMesh(verts, faces), Transform(position=(x, 0.0, 0.0))))
    if args.shape in ("hemisphere", "both"):
        verts, faces = generate_hemisphere(radius=1.0, rings=args.rings // 2, segments=segments)
        x = 1.3 if args.shape == "both" else 0.0
        meshes.append((SurfaceMesh(verts, faces), Transform(position=(x, -0.5, 0.0))))

    for i, (mesh, transform) in enumerate(meshes):
        world.spawn(f"blob-{i}", mesh, transform)

    # 2. Window
    width, height = args.width, args.height
    pygame.init()
    clock = pygame.time.Clock()
    pygame.display.set_mode((width, height), pygame.OPENGL | pygame.DOUBLEBUF)
    pygame.display.set_caption("Mesh Deformer")
    ctx = moderngl.create_context()

    renderer = Renderer(ctx, width, height)
    for mesh, transform in meshes:
        renderer.add_mesh(mesh, transform)

    camera = OrbitCamera(width, height, distance=5.0)
    adapter = ForceInputAdapter(PygameTriggers(camera), world.picker, world.scene, input_config)
    world.scheduler.add_adapter(adapter)

    logger.info("Controls: LMB inflate | RMB pinch | arrows rotate | +/- zoom")
    logger.info("          Q/A spring | E/D damping | W wireframe | R reset | Space pause")

    running = True
    paused = False
    accumulator = 0.0
    render_fps_target = 60

    while running:
        frame_dt = clock.tick(render_fps_target) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

            elif event.type == pygame.KEYDOWN:
                keys_pressed = pygame.key.get_pressed()
                shift_held = keys_pressed[pygame.K_LSHIFT] or keys_pressed[pygame.K_RSHIFT]
                factor = 1.5 if shift_held else 1.1

                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    paused = not paused
                    logger.info("Physics %s", "paused" if paused else "resumed")
                elif event.key == pygame.K_w:
                    renderer.toggle_wireframe()
                elif event.key == pygame.K_r:
                    world.reset()
                    logger.info("Simulation reset")
                elif event.key in (pygame.K_q, pygame.K_a):
                    spring = world.config.spring_force
                    spring = spring * factor if event.key == pygame.K_q else spring / factor
                    world.set_config(world.config.replace(spring_force=spring))
                    logger.info("Spring force: %.2f", spring)
                elif event.key in (pygame.K_e, pygame.K_d):
                    damping = world.config.damping
                    damping = damping * factor if event.key == pygame.K_e else damping / factor
                    world.set_config(world.config.replace(damping=damping))
                    logger.info("Damping: %.2f", damping)

        # Continuous input
        keys = pygame.key.get_pressed()
        if keys[pygame.K_LEFT]:
            camera.rotate(0.0, -0.03)
        if keys[pygame.K_RIGHT]:
            camera.rotate(0.0, 0.03)
        if keys[pygame.K_UP]:
            camera.rotate(0.03, 0.0)
        if keys[pygame.K_DOWN]:
            camera.rotate(-0.03, 0.0)
        if keys[pygame.K_EQUALS] or keys[pygame.K_PLUS]:
            camera.zoom(0.05)
        if keys[pygame.K_MINUS]:
            camera.zoom(-0.05)

        # Fixed-step physics; drop backlog after a stall rather than spiral
        if not paused:
            accumulator = min(accumulator + frame_dt, 0.25)
            while accumulator >= physics_dt:
                world.scheduler.tick(physics_dt)
                accumulator -= physics_dt

        overlay = [
            f"FPS: {clock.get_fps():.1f}",
            f"Spring: {world.config.spring_force:.2f}",
            f"Damping: {world.config.damping:.2f}",
            f"Force: {adapter.force:.2f}",
            f"Max disp: {max(world.body_of(o).max_displacement() for o in world.objects):.3f}",
        ]
        if paused:
            overlay.append("PAUSED")
        renderer.draw(camera, overlay)

    logger.info("Shutting down")
    pygame.quit()


if __name__ == "__main__":
    main()
