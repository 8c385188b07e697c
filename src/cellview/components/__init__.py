"""Widgets."""

from cellview.components.button import Button
from cellview.components.checkbox import Checkbox
from cellview.components.context_menu import ContextMenu, ModalHost
from cellview.components.drop_down import DropDown
from cellview.components.flex import Flex
from cellview.components.form import Form, FormItem
from cellview.components.frame import Frame
from cellview.components.grid import Grid
from cellview.components.input_field import InputField
from cellview.components.list import List, ListItem
from cellview.components.modal import Modal
from cellview.components.pages import Pages
from cellview.components.table import Table
from cellview.components.text_view import RegionInfo, TextView
from cellview.primitive import Box

__all__ = [
    "Box",
    "Button",
    "Checkbox",
    "ContextMenu",
    "DropDown",
    "Flex",
    "Form",
    "FormItem",
    "Frame",
    "Grid",
    "InputField",
    "List",
    "ListItem",
    "ModalHost",
    "Modal",
    "Pages",
    "RegionInfo",
    "Table",
    "TextView",
]
