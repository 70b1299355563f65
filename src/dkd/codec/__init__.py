"""Field-level encoding helpers shared by the transform engine and the wire codec."""
