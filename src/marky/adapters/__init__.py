"""UI hosts that drive an EditorSession."""
