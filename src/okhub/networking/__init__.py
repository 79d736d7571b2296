"""HTTP request pipeline: encode, execute, parse, normalize, paginate."""
