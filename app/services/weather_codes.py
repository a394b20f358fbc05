from __future__ import annotations

# WMO weather interpretation codes as reported by Open-Meteo.
WMO_LABELS: dict[int, str] = {
    0: "Céu Limpo ☀️",
    1: "Predom. Limpo 🌤️",
    2: "Parcial. Nublado ⛅",
    3: "Encoberto ☁️",
    45: "Nevoeiro 🌫️",
    48: "Nevoeiro c/ Geada 🌫️",
    51: "Garoa Leve 🌧️",
    53: "Garoa Moderada 🌧️",
    55: "Garoa Densa 🌧️",
    61: "Chuva Fraca ☔",
    63: "Chuva Moderada ☔",
    65: "Chuva Forte ⛈️",
    80: "Pancadas de Chuva 🌦️",
    81: "Pancadas Fortes ⛈️",
    95: "Tempestade ⚡",
    96: "Tempestade c/ Granizo ❄️⚡",
}


def translate_weather_code(code: int | None) -> str:
    """Return a human-readable label for a WMO weather code.

    Unknown codes never raise; they map to a generic ``"Clima (N)"`` label.
    """
    label = WMO_LABELS.get(code) if code is not None else None
    return label or f"Clima ({code})"
