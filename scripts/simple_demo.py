#!/usr/bin/env python3
"""
Minimal node editor demo: two nodes, links drawn by hand.

Usage:
    python scripts/simple_demo.py
    python scripts/simple_demo.py --theme light --state /tmp/editor.json
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def example_nodes():
    """The two nodes of the demo graph."""
    from nodeweave.core import NodeArgs, NodeBuilder, PinArgs, PinShape, Vec2

    return [
        NodeBuilder(0, NodeArgs(outline=(173, 216, 230, 255)))
        .with_origin(Vec2(50.0, 150.0))
        .with_title("Example Node A")
        .with_input_attribute(0, "Input", PinArgs(shape=PinShape.TRIANGLE))
        .with_static_attribute(1, "Can't Connect to Me")
        .with_output_attribute(2, "Output", PinArgs(shape=PinShape.TRIANGLE_FILLED))
        .build(),
        NodeBuilder(1)
        .with_origin(Vec2(225.0, 150.0))
        .with_title("Example Node B")
        .with_static_attribute(3, "Can't Connect to Me")
        .with_output_attribute(4, "Output")
        .with_input_attribute(5, "Input")
        .build(),
    ]


def main() -> int:
    parser = argparse.ArgumentParser(description="Simple node editor demo")
    parser.add_argument("--theme", default="dark", choices=["dark", "classic", "light"])
    parser.add_argument("--state", type=Path, help="Load/save editor state from this file")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    from PySide6.QtWidgets import QApplication

    from nodeweave.core import FormatError, NodeEditor, Style, load_settings
    from nodeweave.ui.node_graph import NodeEditorCanvas

    app = QApplication(sys.argv)
    app.setApplicationName("NodeWeave Demo")

    nodes = example_nodes()
    links: dict[int, tuple[int, int]] = {}
    next_link_id = 0

    editor = NodeEditor(Style.themed(args.theme), load_settings())
    if args.state and args.state.exists():
        try:
            editor.load_state(args.state)
        except FormatError as e:
            print(f"Ignoring saved state: {e}")

    canvas = NodeEditorCanvas(
        lambda: (nodes, [(lid, start, end) for lid, (start, end) in links.items()]),
        editor,
    )

    def on_link_created(event):
        nonlocal next_link_id
        links[next_link_id] = (event.start, event.end)
        next_link_id += 1

    def on_link_destroyed(link_id):
        links.pop(link_id, None)

    canvas.link_created.connect(on_link_created)
    canvas.link_destroyed.connect(on_link_destroyed)

    canvas.setWindowTitle("NodeWeave - Simple Demo")
    canvas.resize(800, 600)
    canvas.show()

    exit_code = app.exec()

    if args.state:
        editor.save_state(args.state)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
