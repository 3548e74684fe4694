"""Templates generation."""

from pathlib import Path
from typing import Union

# Template content
BASE_HTML = """{% macro photo_grid(photos) %}
<div class="grid">
  {% for p in photos %}
  <a class="card" href="{{ url_for('shotwell_show', id=p.id, basename=p.basename|urlencode) }}?format=html">
    <img loading="lazy" src="{{ url_for('shotwell_thumb', id=p.id, basename=p.basename|urlencode) }}" alt="{{ p.title or p.basename }}">
    <div class="name">{{ p.title or p.basename }}</div>
  </a>
  {% else %}
  <p class="muted">No photos.</p>
  {% endfor %}
</div>
{% endmacro %}

<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{{ title or 'Shotwell' }}</title>
  <style>
  :root{--bg:#0f1115;--fg:#e5e7eb;--muted:#a1a1aa;--card:#111318;--brand:#7aa2ff}
  body{margin:0;background:var(--bg);color:var(--fg);font:15px/1.4 system-ui,sans-serif}
  a{color:var(--brand);text-decoration:none}
  .topbar{padding:12px 20px;border-bottom:1px solid #1f2430}.topbar a{margin-right:16px}
  .container{padding:20px}.muted{color:var(--muted)}
  .grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(120px,1fr));gap:12px}
  .card{background:var(--card);border:1px solid #1f2430;border-radius:8px;overflow:hidden;text-align:center}
  .card img{width:100%;height:110px;object-fit:contain;background:#090a0d}
  .card .name{padding:6px;font-size:11px;color:var(--muted);white-space:nowrap;overflow:hidden;text-overflow:ellipsis}
  .photo img{max-width:100%}
  </style>
</head>
<body>
  <header class="topbar">
    <nav>
      <a href="{{ url_for('shotwell_events') }}">Events</a>
      <a href="{{ url_for('shotwell_tags') }}">Tags</a>
    </nav>
  </header>
  <main class="container">
    {% block content %}{% endblock %}
  </main>
</body>
</html>
"""

EVENTS_HTML = """{% extends 'base.html' %}
{% block content %}
<h1>Events</h1>
<ul>
  {% for e in events %}
  <li>
    <a href="{{ url_for('shotwell_event', event_id=e.id, event_name=e.name|replace('/', '-')|urlencode) }}">{{ e.name }}</a>
    {% if e.time_created %}<span class="muted">{{ e.time_created|datetime }}</span>{% endif %}
  </li>
  {% else %}
  <li class="muted">No events.</li>
  {% endfor %}
</ul>
{% endblock %}
"""

EVENT_HTML = """{% extends 'base.html' %}
{% block content %}
{% from 'base.html' import photo_grid with context %}
<h1>{{ event.name or 'Event' }}</h1>
{% if event.comment %}<p class="muted">{{ event.comment }}</p>{% endif %}
{{ photo_grid(photos) }}
{% endblock %}
"""

TAGS_HTML = """{% extends 'base.html' %}
{% block content %}
<h1>Tags</h1>
<ul>
  {% for t in tags %}
  <li><a href="{{ url_for('shotwell_tag', tag_name=t.name|urlencode) }}">{{ t.name }}</a> <span class="muted">({{ t.photo_ids|length }})</span></li>
  {% else %}
  <li class="muted">No tags.</li>
  {% endfor %}
</ul>
{% endblock %}
"""

TAG_HTML = """{% extends 'base.html' %}
{% block content %}
{% from 'base.html' import photo_grid with context %}
<h1>{{ tag.name }}</h1>
{{ photo_grid(photos) }}
{% endblock %}
"""

SHOW_HTML = """{% extends 'base.html' %}
{% block content %}
<h1>{{ photo.title or photo.basename }}</h1>
<div class="photo">
  <a href="{{ url_for('shotwell_raw', id=photo.id, basename=photo.basename|urlencode) }}">
    <img src="{{ url_for('shotwell_show', id=photo.id, basename=photo.basename|urlencode) }}?format=jpg" alt="{{ photo.basename }}">
  </a>
</div>
<p class="muted">
  {{ photo.width or '?' }}×{{ photo.height or '?' }}
  {% if photo.timestamp %}· {{ photo.timestamp|datetime }}{% endif %}
</p>
{% endblock %}
"""


def ensure_assets(templates_dir: Union[str, Path]) -> None:
    """Write the templates on first run so this file is standalone."""
    templates_dir = Path(templates_dir)
    templates_dir.mkdir(parents=True, exist_ok=True)
    files = {
        templates_dir / "base.html": BASE_HTML,
        templates_dir / "events.html": EVENTS_HTML,
        templates_dir / "event.html": EVENT_HTML,
        templates_dir / "tags.html": TAGS_HTML,
        templates_dir / "tag.html": TAG_HTML,
        templates_dir / "show.html": SHOW_HTML,
    }
    for p, content in files.items():
        if not p.exists():
            p.write_text(content, encoding="utf-8")
