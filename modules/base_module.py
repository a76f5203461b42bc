from PySide6.QtCore import QObject
from PySide6.QtWidgets import QWidget


class BaseModule(QObject):
    """A screen hosted in the main window; `title` labels its nav entry."""

    title: str = ""

    def get_widget(self) -> QWidget:
        raise NotImplementedError
