from pathlib import Path
from PIL import Image, PngImagePlugin
from typing import Optional, Dict
import svgwrite
import xml.etree.ElementTree as ET
from xml.etree.ElementTree import Element, SubElement
from svgwrite.base import BaseElement
import re

from bead.legend import rgb_to_hex
from bead.pattern import QuantizedResult
from bead.render import contrast_color

BEADGEN_NS_URI = 'http://www.github.com/beadgen/beadgen/assets/ns/beadgen#'
PNG_METADATA_PREFIX = "beadgen:"
SOFTWARE_TAG = "beadgen bead/stitch pattern generator"


def _clean_metadata_key(key: str) -> str:
    key_clean = re.sub(r'\s+', '_', key)
    key_clean = re.sub(r'[^a-zA-Z0-9_.-]', '', key_clean)
    if not key_clean or not re.match(r'^[a-zA-Z_]', key_clean):  # must start with letter or underscore
        key_clean = "beadgen_" + key_clean
    # PNG tEXt keywords are capped at 79 bytes, leave room for the prefix
    return key_clean[:70]


class Verbatim(BaseElement):
    """Raw XML dropped into an svgwrite drawing as-is (used for the <metadata> block)."""

    def __init__(self, xml_string="", elementname="metadata", **kwargs_for_base_element):
        self.elementname = elementname
        super(Verbatim, self).__init__(**kwargs_for_base_element)
        self.xml_string = xml_string

    def write(self, fileobj, indent=0, newline='\n', options=None):
        fileobj.write(self.xml_string)

    def get_xml(self):
        # dwg.tostring() appends our element into an ElementTree, so this must be a real Element
        return ET.fromstring(self.xml_string)


def save_pattern_png(
    image_to_save: Image.Image,
    output_path: Path,
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None
):
    """
    Saves a PIL Image object as a PNG file, embedding run metadata as tEXt chunks.
    """
    if not isinstance(output_path, Path):
        output_path = Path(output_path)

    if not output_path.parent.exists():
        output_path.parent.mkdir(parents=True, exist_ok=True)

    png_info = PngImagePlugin.PngInfo()

    if command_line_invocation:
        png_info.add_text(f"{PNG_METADATA_PREFIX}command_line", command_line_invocation)

    png_info.add_text("Software", SOFTWARE_TAG)

    if additional_metadata:
        for key, value in additional_metadata.items():
            png_info.add_text(f"{PNG_METADATA_PREFIX}{_clean_metadata_key(key)}", str(value))

    image_to_save.save(output_path, "PNG", pnginfo=png_info)


def _metadata_xml(command_line_invocation: Optional[str], additional_metadata: Optional[Dict[str, str]]) -> str:
    ET.register_namespace('beadgen', BEADGEN_NS_URI)

    metadata_root = Element('metadata')
    metadata_root.set('id', 'beadgenApplicationDataContainer')

    custom_metadata = SubElement(metadata_root, f'{{{BEADGEN_NS_URI}}}beadgenMetadata')
    custom_metadata.set('id', 'beadgenApplicationMetadata')

    software_el = SubElement(custom_metadata, f'{{{BEADGEN_NS_URI}}}Software')
    software_el.text = SOFTWARE_TAG

    if command_line_invocation:
        cli_el = SubElement(custom_metadata, f'{{{BEADGEN_NS_URI}}}CommandLineInvocation')
        cli_el.text = command_line_invocation

    if additional_metadata:
        for key, value in additional_metadata.items():
            item_el = SubElement(custom_metadata, f'{{{BEADGEN_NS_URI}}}{_clean_metadata_key(key)}')
            item_el.text = str(value)

    return ET.tostring(metadata_root, encoding='unicode', method='xml')


def save_pattern_svg(
    output_path: Path,
    result: QuantizedResult,
    cell_size: int = 20,
    show_symbols: bool = True,
    show_grid_lines: bool = True,
    grid_line_color: str = "#cccccc",
    command_line_invocation: Optional[str] = None,
    additional_metadata: Optional[Dict[str, str]] = None
):
    """
    Writes the pattern chart as SVG: one <rect> per cell, symbols as <text>,
    grid lines as an outline style on the cell group.
    """
    if not isinstance(output_path, Path):
        output_path = Path(output_path)

    width, height = result.width * cell_size, result.height * cell_size
    dwg = svgwrite.Drawing(
        filename=str(output_path),
        size=(f"{width}px", f"{height}px"),
        profile='full'
    )

    dwg.add(Verbatim(
        xml_string=_metadata_xml(command_line_invocation, additional_metadata),
        elementname='metadata',
        profile=dwg.profile,
        debug=dwg.debug
    ))

    cell_style = f"stroke:{grid_line_color}; stroke-width:1px;" if show_grid_lines else "stroke:none;"
    cell_group = dwg.g(id="bead-cells", style=cell_style)
    label_group = dwg.g(
        id="bead-symbols",
        style=f"text-anchor:middle; dominant-baseline:central; font-family:sans-serif; font-size:{cell_size * 0.6:g}px;"
    )

    for y in range(result.height):
        for x in range(result.width):
            color = result.color_at(y, x)
            cell_group.add(dwg.rect(insert=(x * cell_size, y * cell_size), size=(cell_size, cell_size), fill=rgb_to_hex(color)))
            if show_symbols:
                label_group.add(dwg.text(
                    result.symbol_map[color],
                    insert=(x * cell_size + cell_size / 2.0, y * cell_size + cell_size / 2.0),
                    fill=rgb_to_hex(contrast_color(color))
                ))

    dwg.add(cell_group)
    if show_symbols:
        dwg.add(label_group)

    dwg.save(pretty=True)
