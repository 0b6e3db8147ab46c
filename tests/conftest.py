import dataclasses
import os

# Qt must be headless before any QApplication is created
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import fitz  # PyMuPDF
import pytest

from pdfdesk.controllers import AnnotationCanvasController, ViewerNavigation, ViewerState
from pdfdesk.core.annotations import PageAnnotationStore, TextAnnotation


def build_pdf(page_count, width=595, height=842):
    doc = fitz.open()
    for i in range(page_count):
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), f"Page {i + 1}", fontsize=24)
    data = doc.tobytes()
    doc.close()
    return data


def build_png(width=40, height=30, color=(0, 128, 255)):
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.set_rect(pix.irect, color)
    return pix.tobytes("png")


@pytest.fixture
def make_pdf(tmp_path):
    """Factory writing an n-page PDF into tmp_path."""
    def _make(page_count=3, name="sample.pdf", **kwargs):
        path = tmp_path / name
        path.write_bytes(build_pdf(page_count, **kwargs))
        return str(path)
    return _make


@pytest.fixture
def sample_pdf(make_pdf):
    return make_pdf(3)


@pytest.fixture
def make_png(tmp_path):
    def _make(name="image.png", width=40, height=30):
        path = tmp_path / name
        path.write_bytes(build_png(width, height))
        return str(path)
    return _make


class FakeSurface:
    """In-memory drawing surface recording what the controller does."""

    def __init__(self):
        self.objects = []
        self.selected = set()
        self.free_drawing = False
        self.brush = None
        self.stroke_handler = None
        self.last_selected_on_add = None

    def get_objects(self):
        return list(self.objects)

    def set_objects(self, objects):
        self.objects = list(objects)
        self.selected = set()

    def add_object(self, obj, select=False):
        self.objects.append(obj)
        if select:
            self.selected = {len(self.objects) - 1}
            self.last_selected_on_add = obj

    def clear(self):
        self.objects = []
        self.selected = set()

    def delete_selected(self):
        kept = [o for i, o in enumerate(self.objects) if i not in self.selected]
        removed = len(self.objects) - len(kept)
        self.objects = kept
        self.selected = set()
        return removed

    def recolor_selected(self, color):
        for i in self.selected:
            obj = self.objects[i]
            field = "color" if isinstance(obj, TextAnnotation) else "stroke_color"
            self.objects[i] = dataclasses.replace(obj, **{field: tuple(color)})
        return len(self.selected)

    def set_free_drawing(self, enabled, color, width):
        self.free_drawing = enabled
        self.brush = (tuple(color), width)

    def set_stroke_handler(self, handler):
        self.stroke_handler = handler


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def store():
    return PageAnnotationStore()


@pytest.fixture
def state():
    return ViewerState()


@pytest.fixture
def controller(store, state, surface):
    return AnnotationCanvasController(store, state, surface)


@pytest.fixture
def navigation(state, controller):
    nav = ViewerNavigation(state, controller)
    nav.reset(3)
    return nav


@pytest.fixture(scope="session")
def qapp():
    from PyQt5.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app
