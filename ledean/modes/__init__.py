"""LED animation modes and the controller that switches between them."""