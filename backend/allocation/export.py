from io import BytesIO

import pandas as pd

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def matrix_frame(matrix):
    """One row per course x section type, one column per faculty, totals last."""
    names = [c["name"] or c["email"] for c in matrix["columns"]]
    # two faculty with the same name would collapse into one column
    names = [
        name if names.count(name) == 1 else c["email"]
        for name, c in zip(names, matrix["columns"])
    ]
    records = []
    for row in matrix["rows"]:
        record = {
            "Course": row["course_code"],
            "Name": row["course_name"],
            "Section": row["section_type"],
            "Allocated": row["allocated"],
            "Pending": row["pending"],
        }
        record.update(zip(names, row["cells"]))
        records.append(record)

    totals = {"Course": "Total", "Name": "", "Section": "", "Allocated": "", "Pending": ""}
    totals.update(zip(names, matrix["totals"]))
    records.append(totals)
    return pd.DataFrame(records, columns=["Course", "Name", "Section", "Allocated", "Pending", *names])


def matrix_workbook(matrix, sheet_name="Credit Load"):
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        matrix_frame(matrix).to_excel(writer, sheet_name=sheet_name, index=False)
    output.seek(0)
    return output.getvalue()
