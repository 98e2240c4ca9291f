"""
The MODEL layer contains pure data structures and the label store.
It has NO knowledge of drawing gestures or of the rendering layer.
It deals with Key geometry, label encoding and matrix assignments.
"""
