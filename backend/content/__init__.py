"""Editable page content: key schema, defaults, list codec, edit tracking and previews."""
