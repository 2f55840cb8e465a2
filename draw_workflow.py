#!/usr/bin/env python
"""
Generate workflow visualizations

Usage: python draw_workflow.py [output_dir]
"""

import os
import sys

from content_brain.utils import draw_workflow_graphs


def main():
    output_dir = sys.argv[1] if len(sys.argv) > 1 else "."

    print(f"Generating workflow graphs in: {output_dir}")

    result = draw_workflow_graphs(output_dir)

    if result:
        for path in result:
            print(f"✓ Saved: {os.path.abspath(path)}")
    else:
        print("✗ Failed to generate graphs")
        sys.exit(1)


if __name__ == "__main__":
    main()
