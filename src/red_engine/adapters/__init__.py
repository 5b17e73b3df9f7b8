"""Host adapters embedding the editing session."""
