import sys
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from hl7mask.hl7_utils import mask_hl7_message


class Command(BaseCommand):
    help = "Mask identifying fields in an HL7 v2 message file and print the result."

    def add_arguments(self, parser):
        parser.add_argument("path", help="HL7 message file, or - to read stdin")
        parser.add_argument("--encoding", default="utf-8")

    def handle(self, *args, **options):
        path = options["path"]
        if path == "-":
            hl7_text = sys.stdin.read()
        else:
            source = Path(path)
            if not source.is_file():
                raise CommandError(f"HL7 file not found: {path}")
            # newline="" keeps bare \r segment terminators intact
            with source.open(encoding=options["encoding"], errors="replace", newline="") as fh:
                hl7_text = fh.read()

        result = mask_hl7_message(hl7_text)
        if "error" in result:
            raise CommandError(result["error"])

        self.stdout.write(result["masked_hl7"], ending="")
        self.stderr.write(
            f"{result['segment_count']} segment(s), "
            f"{result['masked_field_count']} field(s) masked"
        )
