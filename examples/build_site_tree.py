#!/usr/bin/env python3
"""
Site tree example
Builds the navigation tree of a small site from page records, no browser needed
"""

import json
from sitemapper.crawler import PageRecord
from sitemapper.tree import build_site_tree


def main():
    print("🌿 Site Tree Example")
    print("="*50)

    # Records arrive in whatever order the crawler captured them
    records = [
        PageRecord(url='https://example.com/en/about', title='About'),
        PageRecord(url='https://example.com/', title='Home', thumbnail_ref='private/demo/example.com-top.png'),
        PageRecord(url='https://example.com/en', title='English'),
        PageRecord(url='https://example.com/docs/guide/install', title='Install'),
        PageRecord(url='https://example.com/en#', title='English (anchor)'),
    ]

    tree = build_site_tree('https://example.com/', records)

    print(json.dumps(tree.to_dict(), indent=2))
    print(f"\n🖼️  Thumbnail: {tree.first_thumbnail_ref()}")
    print("\n✅ Site tree example completed!")


if __name__ == "__main__":
    main()
