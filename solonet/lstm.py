"""Single-step LSTM inference in numpy.

The cell implements the standard four-gate LSTM used by the Impro-Visor
experts, one timestep at a time:

	z = concat(x, h_prev)
	i = sigmoid(z @ Wi + bi)        input gate
	f = sigmoid(z @ Wf + bf)        forget gate
	g = tanh(z @ Wc + bc)           candidate
	o = sigmoid(z @ Wo + bo)        output gate
	c = f * c_prev + i * g
	h = o * tanh(c)

The cell holds no state of its own; callers pass the previous ``(h, c)``
and keep what comes back.
"""

import typing

import numpy as np

import solonet.weights


State = typing.Tuple[np.ndarray, np.ndarray]


def sigmoid (x: np.ndarray) -> np.ndarray:

	"""Logistic function, written so large negative inputs do not overflow."""

	return 0.5 * (1.0 + np.tanh(0.5 * x))


class LSTMCell:

	"""
	One LSTM layer evaluated a step at a time.
	"""

	def __init__ (self, weights: solonet.weights.LSTMWeights) -> None:

		"""
		Wrap a validated weight set; all four gate matrices are fused into one for a single matmul.
		"""

		self.weights = weights
		self.input_size = weights.input_size
		self.hidden_size = weights.hidden_size

		self._w = np.concatenate([weights.input_w, weights.forget_w, weights.activate_w, weights.out_w], axis=1)
		self._b = np.concatenate([weights.input_b, weights.forget_b, weights.activate_b, weights.out_b])


	def initial_state (self) -> State:

		"""
		Return fresh copies of the trained initial hidden and cell vectors.
		"""

		return self.weights.initial_h.copy(), self.weights.initial_c.copy()


	def step (self, x: np.ndarray, h_prev: np.ndarray, c_prev: np.ndarray) -> State:

		"""Advance the layer by one timestep and return the new ``(h, c)``.

		Parameters:
			x: Input vector of length ``input_size``.
			h_prev: Previous hidden state of length ``hidden_size``.
			c_prev: Previous cell state of length ``hidden_size``.
		"""

		if x.shape != (self.input_size,):
			raise ValueError(f"LSTM input must have shape ({self.input_size},), got {x.shape}")

		z = np.concatenate([x, h_prev])
		gates = z @ self._w + self._b

		n = self.hidden_size
		i = sigmoid(gates[:n])
		f = sigmoid(gates[n:2 * n])
		g = np.tanh(gates[2 * n:3 * n])
		o = sigmoid(gates[3 * n:])

		c = f * c_prev + i * g
		h = o * np.tanh(c)

		return h, c
