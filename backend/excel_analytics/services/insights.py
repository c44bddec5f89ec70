from datetime import datetime, timezone
from typing import Any, Dict

RECOMMENDATIONS = [
    "Consider focusing on periods with higher values",
    "Look for patterns in the data distribution",
    "Monitor for any outliers or anomalies",
]


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def summarize_chart_data(chart_data: Dict[str, Any], y_label: str) -> Dict[str, Any]:
    """Text insights for the first dataset of a chart"""
    datasets = chart_data.get("datasets") or [{}]
    data = list(datasets[0].get("data") or [])
    labels = list(chart_data.get("labels") or [])
    generated_at = datetime.now(timezone.utc).isoformat()

    if not data:
        return {
            "summary": f"Analysis of {y_label} data shows 0 data points.",
            "trends": [],
            "recommendations": list(RECOMMENDATIONS),
            "generatedAt": generated_at,
        }

    max_value = max(data)
    min_value = min(data)
    avg_value = sum(data) / len(data)
    max_label = labels[data.index(max_value)] if data.index(max_value) < len(labels) else ""
    min_label = labels[data.index(min_value)] if data.index(min_value) < len(labels) else ""

    return {
        "summary": (
            f"Analysis of {y_label} data shows {len(data)} data points "
            f"with an average of {avg_value:.2f}."
        ),
        "trends": [
            f"Highest value: {_format_value(max_value)} ({max_label})",
            f"Lowest value: {_format_value(min_value)} ({min_label})",
            f"Average: {avg_value:.2f}",
        ],
        "recommendations": list(RECOMMENDATIONS),
        "generatedAt": generated_at,
    }
