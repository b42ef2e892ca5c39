"""Legacy unit excluded by the example ignore pattern."""


class OldModule:
    description = "Superseded; kept for reference"
