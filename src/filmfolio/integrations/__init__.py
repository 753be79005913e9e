"""Remote service clients used by the storage backends."""
