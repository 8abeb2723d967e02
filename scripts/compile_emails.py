#!/usr/bin/env python3
"""Build the runtime email templates.

Sources in app/templates/emails/*.j2 get their CSS inlined and are minified
into app/templates/emails/compiled/*.html, which EmailService renders. Rerun
after editing a source template:

    python scripts/compile_emails.py
"""

import argparse
import sys
from pathlib import Path

import css_inline
import minify_html
from jinja2 import Environment, FileSystemLoader, select_autoescape

EMAILS_DIR = Path(__file__).resolve().parent.parent / "app" / "templates" / "emails"

# Source template -> variables filled in at send time
TEMPLATES: dict[str, tuple[str, ...]] = {
    "otp-verification.j2": ("app_name", "full_name", "otp", "expires_minutes"),
}


def _placeholder(var: str) -> str:
    # Plain token, left alone by css_inline and minify_html
    return f"__jinja_var_{var}__"


def compile_template(
    env: Environment, template_name: str, variables: tuple[str, ...], output_dir: Path
) -> Path:
    html = env.get_template(template_name).render(
        **{var: _placeholder(var) for var in variables}
    )
    html = minify_html.minify(css_inline.inline(html), minify_css=True)
    for var in variables:
        html = html.replace(_placeholder(var), "{{ %s }}" % var)

    output_path = output_dir / f"{Path(template_name).stem}.html"
    output_path.write_text(html, encoding="utf-8")
    return output_path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--source", type=Path, default=EMAILS_DIR)
    args = parser.parse_args(argv)

    output_dir = args.source / "compiled"
    output_dir.mkdir(exist_ok=True)
    env = Environment(
        loader=FileSystemLoader(str(args.source)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )

    failed = False
    for template_name, variables in TEMPLATES.items():
        if not (args.source / template_name).exists():
            print(f"missing: {template_name}", file=sys.stderr)
            failed = True
            continue
        output_path = compile_template(env, template_name, variables, output_dir)
        print(f"{template_name} -> {output_path.relative_to(args.source)}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
