import pandas as pd
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from courses.models import Course, DegreeType, OfferedAs
from rich.console import Console
from rich.table import Table

console = Console()

REQUIRED_COLUMNS = {'code', 'name'}


class Command(BaseCommand):
    help = 'Seed courses from a CSV or XLSX sheet (code, name, lecture_units, practical_units, ...)'

    def add_arguments(self, parser):
        parser.add_argument('path', type=str, help='CSV or XLSX file')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Run without making changes to the database',
        )

    def _read(self, path):
        if path.lower().endswith(('.xlsx', '.xls')):
            return pd.read_excel(path, dtype=str)
        return pd.read_csv(path, dtype=str, encoding='utf-8-sig')

    def _row_values(self, row):
        def units(key):
            value = row.get(key)
            return int(float(value)) if pd.notna(value) and str(value).strip() else 0

        offered_as = (row.get('offered_as') or OfferedAs.CDC).strip().upper()
        offered_to = (row.get('offered_to') or DegreeType.FD).strip()
        also_by = row.get('offered_also_by')
        return {
            'name': str(row['name']).strip(),
            'lecture_units': units('lecture_units'),
            'practical_units': units('practical_units'),
            'total_units': units('total_units'),
            'offered_as': offered_as if offered_as in OfferedAs.values else OfferedAs.CDC,
            'offered_to': offered_to if offered_to in DegreeType.values else DegreeType.FD,
            'offered_also_by': [d.strip() for d in also_by.split(';') if d.strip()]
            if isinstance(also_by, str) else [],
        }

    def handle(self, *args, **options):
        try:
            df = self._read(options['path'])
        except FileNotFoundError:
            raise CommandError(f"File not found: {options['path']}")

        df.columns = [c.strip().lower() for c in df.columns]
        missing = REQUIRED_COLUMNS - set(df.columns)
        if missing:
            raise CommandError(f"Missing column(s): {', '.join(sorted(missing))}")
        df = df.where(pd.notna(df), None)

        rows = [(" ".join(str(r['code']).upper().split()), self._row_values(r)) for r in df.to_dict('records')]
        console.print(f"[green]Found {len(rows)} courses to process[/green]")

        if options['dry_run']:
            console.print("[yellow]Running in DRY RUN mode - no changes will be made[/yellow]")
            table = Table(title="Courses")
            table.add_column("Code", style="cyan")
            table.add_column("Name")
            table.add_column("L", justify="right")
            table.add_column("P", justify="right")
            for code, values in rows:
                table.add_row(code, values['name'], str(values['lecture_units']), str(values['practical_units']))
            console.print(table)
            return

        created_count = updated_count = 0
        with transaction.atomic():
            for code, values in rows:
                _, created = Course.objects.update_or_create(code=code, defaults=values)
                if created:
                    created_count += 1
                    console.print(f"[green]✓[/green] Created course: {code} - {values['name']}")
                else:
                    updated_count += 1
        console.print(f"[green]Courses: {created_count} created, {updated_count} updated[/green]")
