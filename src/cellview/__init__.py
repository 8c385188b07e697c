"""cellview: terminal UI composition, layout and event routing."""

# Application and draw loop
from cellview.application import Application

# Components (re-exported from components package)
from cellview.components import (
    Box,
    Button,
    Checkbox,
    ContextMenu,
    Flex,
    Form,
    Frame,
    Grid,
    InputField,
    List,
    Modal,
    Pages,
    RegionInfo,
    Table,
    TextView,
)

# Configuration
from cellview.config import AppConfig, configure_logging

# Table content
from cellview.content import (
    UNBOUNDED,
    EditableTableContent,
    Finite,
    MemoryTableContent,
    TableCell,
    TableContent,
    TableContentReadOnly,
    Unbounded,
    column_label,
)

# Errors
from cellview.errors import CellviewError, ScreenError

# Keyboard and mouse input
from cellview.keys import Key, KeyEvent, parse_key
from cellview.mouse import MouseAction, MouseEvent

# Geometry
from cellview.layout import Direction, OverlayOptions, Rect

# Primitives and focus routing
from cellview.primitive import Container, Primitive, Widget
from cellview.router import FocusRouter

# Screen
from cellview.screen import Cell, Screen, ScreenBuffer

# Styles and tags
from cellview.style import DEFAULT_STYLE, DEFAULT_THEME, Attr, Style, Theme
from cellview.tags import escape, parse_tags, strip_tags

# Terminal
from cellview.terminal import ProcessTerminal, Terminal

# Utilities
from cellview.utils import Align, truncate_to_width, visible_width

__all__ = [
    "Align",
    "AppConfig",
    "Application",
    "Attr",
    "Box",
    "Button",
    "Cell",
    "CellviewError",
    "Checkbox",
    "Container",
    "ContextMenu",
    "DEFAULT_STYLE",
    "DEFAULT_THEME",
    "Direction",
    "EditableTableContent",
    "Finite",
    "Flex",
    "FocusRouter",
    "Form",
    "Frame",
    "Grid",
    "InputField",
    "Key",
    "KeyEvent",
    "List",
    "MemoryTableContent",
    "Modal",
    "MouseAction",
    "MouseEvent",
    "OverlayOptions",
    "Pages",
    "Primitive",
    "ProcessTerminal",
    "Rect",
    "RegionInfo",
    "Screen",
    "ScreenBuffer",
    "ScreenError",
    "Style",
    "Table",
    "TableCell",
    "TableContent",
    "TableContentReadOnly",
    "Terminal",
    "TextView",
    "Theme",
    "UNBOUNDED",
    "Unbounded",
    "Widget",
    "column_label",
    "configure_logging",
    "escape",
    "parse_key",
    "parse_tags",
    "strip_tags",
    "truncate_to_width",
    "visible_width",
]
