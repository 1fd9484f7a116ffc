import argparse
import json
from pathlib import Path

import pandas as pd

from researchlens.classifier import classify_query
from researchlens.keywords import load_keyword_tables
from researchlens.models import TherapeuticArea
from researchlens.utils import clean_query


def load_cases(path: Path) -> list[dict]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of cases.")
    return data


def analyse_case(case: dict, tables) -> dict:
    query = clean_query(case.get("query", ""))
    hint = case.get("therapeutic_hint")
    result = classify_query(query, tables, hint=TherapeuticArea(hint) if hint else None)

    expected_area = case.get("therapeutic")
    expected_product = case.get("product_type")
    area_ok = expected_area is None or result.therapeutic.value == expected_area
    product_ok = expected_product is None or result.product_type.value == expected_product

    return {
        "query": query,
        "expected_area": expected_area or "-",
        "predicted_area": result.therapeutic.value,
        "expected_product": expected_product or "-",
        "predicted_product": result.product_type.value,
        "scores": {area.value: score for area, score in result.area_scores if score},
        "device_hits": result.device_hits,
        "drug_hits": result.drug_hits,
        "concepts": list(result.concepts),
        "passed": area_ok and product_ok,
    }


def render_markdown(report_path: Path, details: list[dict]) -> None:
    summary_df = pd.DataFrame(
        [
            {
                "Query": d["query"] or "(empty)",
                "Area (expected)": d["expected_area"],
                "Area (predicted)": d["predicted_area"],
                "Product (expected)": d["expected_product"],
                "Product (predicted)": d["predicted_product"],
                "Pass": "yes" if d["passed"] else "NO",
            }
            for d in details
        ]
    )

    passed = sum(1 for d in details if d["passed"])
    lines: list[str] = []
    lines.append("# Keyword Classifier Evaluation")
    lines.append("")
    lines.append(f"{passed} / {len(details)} cases passed.")
    lines.append("")
    lines.append(summary_df.to_markdown(index=False))
    lines.append("")
    lines.append("## Case Details")
    lines.append("")

    for detail in details:
        lines.append(f"### {detail['query'] or '(empty query)'}")
        lines.append("")
        if detail["scores"]:
            scores = ", ".join(f"{area} {score}" for area, score in detail["scores"].items())
            lines.append(f"- Area scores: {scores}")
        else:
            lines.append("- Area scores: none")
        lines.append(f"- Device hits: {detail['device_hits']}, drug hits: {detail['drug_hits']}")
        lines.append(f"- Concepts: {', '.join(detail['concepts']) or 'none'}")
        lines.append("")

    report_path.write_text("\n".join(lines), encoding="utf-8")


def main():
    parser = argparse.ArgumentParser(description="Evaluate the keyword classifier against labelled queries.")
    parser.add_argument(
        "--cases-json",
        type=Path,
        default=Path("data/classifier_cases.json"),
        help="JSON list of {query, therapeutic, product_type, therapeutic_hint} cases.",
    )
    parser.add_argument(
        "--keywords-file",
        type=Path,
        default=None,
        help="Optional keyword table override (defaults to RL_KEYWORDS_FILE or the built-in tables).",
    )
    parser.add_argument(
        "--report-md",
        type=Path,
        default=Path("reports/classifier_eval_report.md"),
        help="Where to write the markdown report.",
    )
    args = parser.parse_args()

    tables = load_keyword_tables(args.keywords_file)
    details = [analyse_case(case, tables) for case in load_cases(args.cases_json)]

    args.report_md.parent.mkdir(parents=True, exist_ok=True)
    render_markdown(args.report_md, details)

    passed = sum(1 for d in details if d["passed"])
    print("Cases passed:", f"{passed}/{len(details)}")
    print("Report saved to:", args.report_md)


if __name__ == "__main__":
    main()
