import html


PENDING_POSTER = '<div class="poster pending">🖼️ PAINTING...</div>'


def poster_html(rec):
    if not rec["poster_url"]:
        return PENDING_POSTER
    return (
        f'<img class="poster" src="{html.escape(rec["poster_url"])}" '
        f'alt="{html.escape(rec["title"])} poster">'
    )


def title_html(rec):
    return (
        f"### {html.escape(rec['title'])} "
        f'<span class="year-badge">{html.escape(str(rec["year"]))}</span>'
    )
