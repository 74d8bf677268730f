"""Pure scheduling components: intervals, expansion, conflicts, slots, lifecycle."""
