"""Shared fixtures: a view-model as the model typically returns it."""

import copy

import pytest

VIEW_MODEL = {
    "ui_version": "1.0",
    "header": {
        "title": "Polleninformation",
        "subtitle": "Standort: Wien Innere Stadt (1010), Wien",
        "timestamp_label": "Aktualisiert: 18-10-2026 09:30",
        "quality_badges": [{"label": "Hoch", "severity": "good"}],
    },
    "kpi_cards": [
        {"id": "overall", "title": "Gesamtbelastung", "value_label": "Mittel",
         "value_level": 2, "severity": "warn", "hint": "Ambrosia noch aktiv"},
        {"id": "trees", "title": "Bäume", "value_label": "Keine",
         "value_level": 0, "severity": "good", "hint": ""},
        {"id": "grasses", "title": "Gräser", "value_label": "Gering",
         "value_level": 1, "severity": "good", "hint": ""},
        {"id": "herbs", "title": "Kräuter", "value_label": "Hoch",
         "value_level": 3, "severity": "bad", "hint": "Beifuß"},
    ],
    "charts": [
        {
            "id": "overall_3day",
            "type": "line",
            "title": "Prognose: Gesamtbelastung (3 Tage)",
            "x": {"type": "category", "label": "Datum",
                  "values": ["18-10-2026", "19-10-2026", "20-10-2026"]},
            "y": {"type": "number", "label": "Belastung", "min": 0, "max": 4},
            "series": [
                {"name": "Gesamt", "values": [2, 1, 1]},
                {"name": "Kräuter", "values": [3, 2]},
            ],
            "annotations": [{"type": "note", "text": "Regen ab Sonntag"}],
        }
    ],
    "tables": [
        {
            "id": "species",
            "title": "Einzelarten",
            "columns": [
                {"key": "pollen_type", "label": "Pollenart"},
                {"key": "label", "label": "Belastung"},
                {"key": "inferred", "label": "Tendenz"},
            ],
            "rows": [
                {"category": "Kräuter", "pollen_type": "Ambrosia", "label": "Mittel", "inferred": "fallend"},
                {"category": "Bäume", "pollen_type": "Erle", "label": "Keine", "inferred": "gleich"},
                {"category": "Kräuter", "pollen_type": "Beifuß", "label": "Hoch", "inferred": "steigend"},
            ],
            "notes": ["Werte teilweise aus Gruppe geerbt"],
            "group_by": "category",
            "default_collapsed_categories": ["Bäume"],
        }
    ],
    "summaries": {
        "today_one_liner": "Mäßige Belastung durch Ambrosia.",
        "next_days_one_liner": "Leichter Rückgang erwartet.",
        "midterm_one_liner": "Regen am Wochenende wäscht Pollen aus.",
    },
    "recommendation_blocks": [
        {
            "id": "actions_today",
            "title": "Tipps für heute",
            "items": [
                {"title": "Haare waschen", "detail": "Vor dem Schlafengehen.", "priority": "hoch"},
                {"title": "Stoßlüften", "detail": "Früh morgens.", "priority": "mittel"},
            ],
        },
        {
            "id": "medical_help",
            "title": "Medizinischer Rat",
            "items": [
                {"title": "Antihistaminika", "detail": "Nach Rücksprache.", "priority": "niedrig"},
            ],
        },
    ],
    "footnotes": ["Skala 0–4"],
    "disclaimer": "Keine ärztliche Diagnose.",
}


@pytest.fixture
def view_model_dict() -> dict:
    return copy.deepcopy(VIEW_MODEL)
