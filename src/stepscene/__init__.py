"""StepScene: author and play back step-by-step 3D instruction models."""
