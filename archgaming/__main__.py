import archgaming

if __name__ == '__main__':
	archgaming.run_as_a_module()
