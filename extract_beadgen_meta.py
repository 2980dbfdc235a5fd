#!/usr/bin/env python3
import sys
from pathlib import Path
from PIL import Image
import xml.etree.ElementTree as ET
from typing import Dict

from bead.file_utils import BEADGEN_NS_URI, PNG_METADATA_PREFIX

SVG_NS = 'http://www.w3.org/2000/svg'


def read_png_metadata(filepath: Path) -> Dict[str, str]:
    """beadgen tEXt entries of a PNG, keyed without the 'beadgen:' prefix."""
    with Image.open(filepath) as img:
        return {
            key[len(PNG_METADATA_PREFIX):]: value
            for key, value in img.info.items()
            if key.startswith(PNG_METADATA_PREFIX)
        }


def read_svg_metadata(filepath: Path) -> Dict[str, str]:
    """Leaf elements in the beadgen namespace inside the SVG's <metadata> block."""
    root = ET.parse(filepath).getroot()
    metadata_element = root.find(f'{{{SVG_NS}}}metadata')
    if metadata_element is None:
        metadata_element = root.find('metadata')
    if metadata_element is None:
        return {}

    found = {}
    for elem in metadata_element.iter():
        if elem.tag.startswith(f'{{{BEADGEN_NS_URI}}}') and len(elem) == 0:
            local_name = elem.tag.split('}', 1)[1]
            found[local_name] = elem.text.strip() if elem.text else ''
    return found


def main():
    if len(sys.argv) < 2:
        print("Usage: python extract_beadgen_meta.py <filename.png_or_svg>")
        sys.exit(1)

    filepath = Path(sys.argv[1])
    if not filepath.is_file():
        print(f"Error: File not found: {filepath}")
        sys.exit(1)

    file_extension = filepath.suffix.lower()
    try:
        if file_extension == ".png":
            metadata = read_png_metadata(filepath)
        elif file_extension == ".svg":
            metadata = read_svg_metadata(filepath)
        else:
            print(f"Error: Unsupported file type '{file_extension}'. Please provide a .png or .svg file.")
            sys.exit(1)
    except ET.ParseError:
        print(f"Error: Could not parse SVG file (invalid XML): {filepath}")
        sys.exit(1)

    print(f"--- beadgen metadata for {filepath.name} ---")
    if not metadata:
        print("  No beadgen-specific metadata found.")
    for key, value in metadata.items():
        print(f"  {key}: {value}")
    print("-" * (30 + len(filepath.name)))


if __name__ == "__main__":
    main()
