"""Static repository documents published next to the generated app."""
from datetime import datetime
from typing import Optional


def generate_mit_license(holder: str, year: Optional[int] = None) -> str:
    """Generate MIT License text."""
    year = year or datetime.now().year
    return f"""MIT License

Copyright (c) {year} {holder}

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""


def generate_readme(task_id: str, brief: str) -> str:
    """README for a single-file app; the brief is embedded verbatim."""
    return f"""# {task_id}

## Summary

This project was automatically generated to fulfill the following brief:

{brief}

## Setup & Usage

This is a static web page. Open the deployed GitHub Pages URL to use the
application, or open `index.html` directly in a modern browser.

## Code Explanation

The application is contained within a single `index.html` file. All styling
lives in a `<style>` tag and all logic in a `<script>` tag. External libraries,
if any, are loaded from a CDN.

## License

This project is licensed under the MIT License - see the LICENSE file for details.
"""
