"""triagekit command-line interface (click)."""
