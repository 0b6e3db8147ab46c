from unittest import mock

from pdfdesk.controllers import AnnotationCanvasController, Tool
from pdfdesk.core.annotations import (CircleAnnotation, FreehandAnnotation, RectangleAnnotation,
                                      TextAnnotation)


class TestToolSelection:

    def test_text_tool_adds_selected_default_text(self, controller, surface):
        controller.select_tool(Tool.TEXT)

        assert surface.objects == [TextAnnotation(position=(100.0, 100.0),
                                                  content="Click to edit text",
                                                  color=(255, 0, 0), font_size=16.0)]
        assert surface.last_selected_on_add is surface.objects[0]
        assert controller.active_tool is Tool.TEXT

    def test_rectangle_and_circle_defaults(self, controller, surface):
        controller.select_tool(Tool.RECTANGLE)
        controller.select_tool(Tool.CIRCLE)

        rect, circle = surface.objects
        assert rect == RectangleAnnotation((100.0, 100.0), (100.0, 60.0), (255, 0, 0), 2.0)
        assert circle == CircleAnnotation((100.0, 100.0), 30.0, (255, 0, 0), 2.0)

    def test_new_objects_use_active_color(self, controller, surface):
        controller.set_color("#00ff00")
        controller.select_tool(Tool.RECTANGLE)
        assert surface.objects[0].stroke_color == (0, 255, 0)

    def test_freehand_toggles_free_drawing(self, controller, surface):
        controller.select_tool(Tool.FREEHAND)
        assert surface.free_drawing
        assert surface.objects == []

        controller.select_tool(Tool.SELECT)
        assert not surface.free_drawing

    def test_color_change_updates_brush_while_drawing(self, controller, surface):
        controller.select_tool(Tool.FREEHAND)
        controller.set_color((0, 0, 255))
        assert surface.brush == ((0, 0, 255), 2.0)

    def test_tool_changed_signal(self, controller):
        received = []
        controller.tool_changed.connect(received.append)
        controller.select_tool(Tool.CIRCLE)
        assert received == [Tool.CIRCLE]


class TestEraser:

    def test_clears_page_and_stores_empty_list(self, controller, surface, store, state):
        state.current_page = 2
        controller.select_tool(Tool.RECTANGLE)
        store.save_current_page(2, surface.get_objects())

        controller.select_tool(Tool.ERASER)

        assert surface.objects == []
        assert store.has_page(2)
        assert store.load_page(2) == []

    def test_does_not_change_active_tool(self, controller):
        controller.select_tool(Tool.RECTANGLE)
        controller.select_tool(Tool.ERASER)
        assert controller.active_tool is Tool.RECTANGLE


class TestStrokes:

    def test_completed_drag_becomes_freehand_object(self, controller, surface):
        controller.select_tool(Tool.FREEHAND)
        surface.stroke_handler([(0, 0), (5, 5), (10, 0)])

        assert surface.objects == [FreehandAnnotation(points=[(0.0, 0.0), (5.0, 5.0), (10.0, 0.0)],
                                                      stroke_color=(255, 0, 0),
                                                      stroke_width=2.0)]

    def test_single_point_is_ignored(self, controller, surface):
        controller.select_tool(Tool.FREEHAND)
        controller.finish_stroke([(1, 1)])
        assert surface.objects == []

    def test_strokes_outside_freehand_are_ignored(self, controller, surface):
        controller.finish_stroke([(0, 0), (1, 1)])
        assert surface.objects == []


def test_without_surface_everything_is_a_no_op(store, state):
    controller = AnnotationCanvasController(store, state)
    listener = mock.Mock()
    controller.annotations_changed.connect(listener)

    controller.select_tool(Tool.TEXT)
    controller.select_tool(Tool.ERASER)
    controller.set_color("#0000ff")
    controller.finish_stroke([(0, 0), (1, 1)])

    assert controller.active_tool is Tool.SELECT
    assert controller.active_color == (255, 0, 0)
    assert controller.delete_selected() == 0
    assert store.visited_pages() == []
    listener.assert_not_called()


def test_delete_selected(controller, surface):
    controller.select_tool(Tool.RECTANGLE)
    controller.select_tool(Tool.TEXT)  # selected on creation
    assert controller.delete_selected() == 1
    assert [type(o) for o in surface.objects] == [RectangleAnnotation]


def test_unbind_surface(controller, surface):
    controller.unbind_surface()
    assert surface.stroke_handler is None
    controller.select_tool(Tool.RECTANGLE)
    assert surface.objects == []


class TestRecolor:

    def test_selected_object_takes_new_color(self, controller, surface):
        controller.select_tool(Tool.RECTANGLE)
        controller.select_tool(Tool.TEXT)  # selected on creation

        controller.set_color("#0000ff")

        rect, text = surface.objects
        assert text.color == (0, 0, 255)
        assert rect.stroke_color == (255, 0, 0)

    def test_strokes_keep_their_color_while_drawing(self, controller, surface):
        controller.select_tool(Tool.FREEHAND)
        controller.finish_stroke([(0, 0), (5, 5)])
        surface.selected = {0}

        controller.set_color((0, 255, 0))

        assert surface.objects[0].stroke_color == (255, 0, 0)
        assert surface.brush == ((0, 255, 0), 2.0)
