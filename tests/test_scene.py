import pytest

from meshdeform.config import DeformerConfig
from meshdeform.scene import Scene, SceneObject, Scheduler
from meshdeform.solver_numpy import DeformableBody


class Tag:
    def __init__(self, label):
        self.label = label


class SpecialBody(DeformableBody):
    pass


class RecordingAdapter:
    def __init__(self, log, injections=0):
        self.log = log
        self.injections = injections

    def poll(self, dt):
        self.log.append(("poll", dt))
        return self.injections


class RecordingBody:
    def __init__(self, log, name):
        self.log = log
        self.name = name

    def integrate(self, dt):
        self.log.append((self.name, dt))


def test_get_component_by_type():
    scene = Scene()
    obj = SceneObject("blob")
    body = DeformableBody(DeformerConfig())
    tag = Tag("x")
    scene.add(obj, body, tag)

    assert scene.get_component(obj, DeformableBody) is body
    assert scene.get_component(obj, Tag) is tag
    assert scene.get_component(obj, int) is None
    assert obj in scene
    assert len(scene) == 1


def test_lookup_on_unknown_object_is_none():
    scene = Scene()
    assert scene.get_component(SceneObject("ghost"), DeformableBody) is None


def test_subclass_satisfies_base_lookup():
    scene = Scene()
    obj = SceneObject("blob")
    body = SpecialBody()
    scene.add(obj, body)
    assert scene.get_component(obj, DeformableBody) is body


def test_attach_replaces_same_type():
    scene = Scene()
    obj = scene.add(SceneObject("blob"), Tag("old"))
    scene.attach(obj, Tag("new"))
    assert scene.get_component(obj, Tag).label == "new"


def test_attach_requires_membership():
    with pytest.raises(KeyError):
        Scene().attach(SceneObject("stray"), Tag("x"))


def test_objects_with_same_name_stay_distinct():
    scene = Scene()
    a = scene.add(SceneObject("twin"), Tag("a"))
    b = scene.add(SceneObject("twin"), Tag("b"))
    assert scene.get_component(a, Tag).label == "a"
    assert scene.get_component(b, Tag).label == "b"


def test_components_of_and_remove():
    scene = Scene()
    a = scene.add(SceneObject("a"), Tag("a"))
    scene.add(SceneObject("b"))
    assert [obj for obj, _ in scene.components_of(Tag)] == [a]

    scene.remove(a)
    assert list(scene.components_of(Tag)) == []
    assert a not in scene


def test_scheduler_polls_adapters_before_integrating():
    log = []
    scheduler = Scheduler()
    scheduler.add_body(RecordingBody(log, "first"))
    scheduler.add_adapter(RecordingAdapter(log, injections=2))
    scheduler.add_body(RecordingBody(log, "second"))

    assert scheduler.tick(0.02) == 2
    assert log == [("poll", 0.02), ("first", 0.02), ("second", 0.02)]
    assert scheduler.tick_count == 1
    assert scheduler.time == pytest.approx(0.02)


def test_scheduler_integrates_without_any_input():
    log = []
    scheduler = Scheduler()
    scheduler.add_body(RecordingBody(log, "only"))
    for _ in range(3):
        scheduler.tick(0.01)
    assert log == [("only", 0.01)] * 3


def test_replace_and_remove_body():
    log = []
    scheduler = Scheduler()
    old = RecordingBody(log, "old")
    new = RecordingBody(log, "new")
    scheduler.add_body(old)
    scheduler.replace_body(old, new)
    scheduler.tick(0.01)
    assert log == [("new", 0.01)]

    scheduler.remove_body(new)
    scheduler.tick(0.01)
    assert log == [("new", 0.01)]
