"""Step-by-step walkthrough of the chain rule for a single neuron weight."""
