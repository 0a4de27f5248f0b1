"""Fixed business-landing-page scaffold rendered from template content."""

import json

from contracts import BrandContext, FileSet
from scaling.config import DEFAULT_FONTS, ENTRY_FILE, ROOT_FILE, STYLESHEET_FILE
from security.schemas import TemplateSections

CONTENT_FILE = "src/content.ts"

SECTION_COMPONENTS = ("Hero", "Services", "About", "Contact", "FAQ", "Footer")

TEMPLATE_PATHS: tuple[str, ...] = (
    ENTRY_FILE,
    ROOT_FILE,
    CONTENT_FILE,
    *(f"src/components/{name}.tsx" for name in SECTION_COMPONENTS),
    STYLESHEET_FILE,
)

_ENTRY = """\
import React from "react";
import ReactDOM from "react-dom/client";
import App from "./App";
import "./styles.css";

ReactDOM.createRoot(document.getElementById("root")!).render(
  <React.StrictMode>
    <App />
  </React.StrictMode>
);
"""

_HERO = """\
import { siteContent } from "../content";

export function Hero() {
  const { hero } = siteContent;
  return (
    <section className="hero section">
      <div className="container">
        <h1>{hero.title}</h1>
        <p>{hero.subtitle}</p>
        <div className="hero-actions">
          <button className="btn btn-primary">{hero.primaryCta}</button>
          <button className="btn btn-secondary">{hero.secondaryCta}</button>
        </div>
      </div>
    </section>
  );
}
"""

_SERVICES = """\
import { siteContent } from "../content";

export function Services() {
  return (
    <section className="section">
      <div className="container">
        <h2>Services</h2>
        <div className="card-grid">
          {siteContent.services.map((service) => (
            <article key={service.title} className="card">
              <h3>{service.title}</h3>
              <p>{service.description}</p>
            </article>
          ))}
        </div>
      </div>
    </section>
  );
}
"""

_ABOUT = """\
import { siteContent } from "../content";

export function About() {
  return (
    <section className="section alt">
      <div className="container">
        <h2>{siteContent.about.title}</h2>
        <p>{siteContent.about.body}</p>
      </div>
    </section>
  );
}
"""

_CONTACT = """\
import { siteContent } from "../content";

export function Contact() {
  const { contact } = siteContent;
  return (
    <section className="section">
      <div className="container">
        <h2>{contact.title}</h2>
        <ul className="contact-list">
          <li>Email: {contact.email}</li>
          <li>Phone: {contact.phone}</li>
          <li>Address: {contact.address}</li>
        </ul>
      </div>
    </section>
  );
}
"""

_FAQ = """\
import { siteContent } from "../content";

export function FAQ() {
  return (
    <section className="section alt">
      <div className="container">
        <h2>FAQ</h2>
        <div className="faq-list">
          {siteContent.faq.map((item) => (
            <details key={item.question} className="faq-item">
              <summary>{item.question}</summary>
              <p>{item.answer}</p>
            </details>
          ))}
        </div>
      </div>
    </section>
  );
}
"""

_FOOTER = """\
import { siteContent } from "../content";

export function Footer() {
  return (
    <footer className="footer">
      <div className="container footer-content">
        <p>{siteContent.footer.copyright}</p>
        <nav aria-label="Footer links">
          {siteContent.footer.links.map((link) => (
            <a key={link} href="#">{link}</a>
          ))}
        </nav>
      </div>
    </footer>
  );
}
"""

_BASE_STYLES = """\
* { box-sizing: border-box; }
body {
  margin: 0;
  font-family: var(--font-body);
  background: var(--color-background);
  color: var(--color-text);
  line-height: 1.6;
}
h1, h2, h3 { font-family: var(--font-heading); line-height: 1.2; margin: 0 0 0.75rem; }
p { margin: 0; }
.section { padding: 5rem 1.25rem; }
.section.alt { background: color-mix(in srgb, var(--color-primary) 8%, var(--color-background)); }
.container { width: min(1100px, 100%); margin: 0 auto; }
.hero {
  background: linear-gradient(140deg, var(--color-primary), var(--color-secondary));
  color: #fff;
  padding-top: 7rem;
  padding-bottom: 7rem;
}
.hero-actions { display: flex; gap: 0.75rem; margin-top: 1.5rem; flex-wrap: wrap; }
.btn { border: 0; border-radius: 999px; padding: 0.7rem 1.25rem; font-weight: 700; cursor: pointer; }
.btn-primary { background: var(--color-accent); color: var(--color-text); }
.btn-secondary { background: rgba(255,255,255,0.18); color: #fff; }
.card-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr)); gap: 1rem; }
.card { padding: 1rem; border-radius: 14px; background: #fff; color: #111; box-shadow: 0 10px 30px rgba(0,0,0,0.08); }
.contact-list { list-style: none; padding: 0; margin: 0; display: grid; gap: 0.5rem; }
.faq-list { display: grid; gap: 0.75rem; }
.faq-item { border: 1px solid rgba(0,0,0,0.08); border-radius: 10px; padding: 0.75rem 1rem; background: #fff; color: #111; }
.footer { padding: 2rem 1.25rem; border-top: 1px solid rgba(0,0,0,0.08); }
.footer-content { display: flex; flex-wrap: wrap; gap: 1rem; justify-content: space-between; }
.footer a { color: var(--color-text); text-decoration: none; margin-right: 0.75rem; }

@media (max-width: 768px) {
  .section { padding: 3.5rem 1rem; }
  .hero { padding-top: 5rem; padding-bottom: 5rem; }
}
"""


def _app_file() -> str:
    imports = "\n".join(
        f'import {{ {name} }} from "./components/{name}";' for name in SECTION_COMPONENTS
    )
    body = "\n".join(f"      <{name} />" for name in SECTION_COMPONENTS)
    return (
        f"{imports}\n\n"
        "export default function App() {\n"
        "  return (\n"
        "    <main>\n"
        f"{body}\n"
        "    </main>\n"
        "  );\n"
        "}\n"
    )


def _content_file(sections: TemplateSections) -> str:
    # JSON literals are valid TypeScript and handle all string escaping
    payload = json.dumps(sections.model_dump(by_alias=True), indent=2)
    return f"export const siteContent = {payload};\n"


def _stylesheet(brand: BrandContext) -> str:
    palette = brand.color_palette
    heading, body = DEFAULT_FONTS
    return (
        ":root {\n"
        f"  --color-primary: {palette.primary};\n"
        f"  --color-secondary: {palette.secondary};\n"
        f"  --color-accent: {palette.accent};\n"
        f"  --color-background: {palette.background};\n"
        f"  --color-text: {palette.text};\n"
        f'  --font-heading: "{heading}", sans-serif;\n'
        f'  --font-body: "{body}", sans-serif;\n'
        "}\n\n"
        f"{_BASE_STYLES}"
    )


def build_template_files(brand: BrandContext, sections: TemplateSections) -> FileSet:
    """Render the fixed ten-file topology for *sections*."""
    return {
        ENTRY_FILE: _ENTRY,
        ROOT_FILE: _app_file(),
        CONTENT_FILE: _content_file(sections),
        "src/components/Hero.tsx": _HERO,
        "src/components/Services.tsx": _SERVICES,
        "src/components/About.tsx": _ABOUT,
        "src/components/Contact.tsx": _CONTACT,
        "src/components/FAQ.tsx": _FAQ,
        "src/components/Footer.tsx": _FOOTER,
        STYLESHEET_FILE: _stylesheet(brand),
    }
