# Gmail only accepts colors from its fixed palette.

LABEL_COLORS = {
    "Jobs/Sites": {
        "backgroundColor": "#16a765",  # green
        "textColor": "#ffffff",
    },
    "Jobs/Interview": {
        "backgroundColor": "#ffad47",  # orange
        "textColor": "#ffffff",
    },
    "External/AcademicReview": {
        "backgroundColor": "#a479e2",  # purple
        "textColor": "#ffffff",
    },
    "School": {
        "backgroundColor": "#4986e7",  # blue
        "textColor": "#ffffff",
    },
    "Ads": {
        "backgroundColor": "#cccccc",  # gray
        "textColor": "#000000",
    },
    "Unknown": {
        "backgroundColor": "#cccccc",  # gray
        "textColor": "#000000",
    },
}


def color_for(path: str, prefix: str) -> dict | None:
    """Color for a label path; site sublabels inherit their parent's color."""
    rel = path[len(prefix) + 1 :] if prefix and path.startswith(prefix + "/") else path
    while rel:
        if rel in LABEL_COLORS:
            return LABEL_COLORS[rel]
        if "/" not in rel:
            break
        rel = rel.rsplit("/", 1)[0]
    return None
